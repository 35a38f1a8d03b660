import logging

from verifybot.dispatcher import CommandDispatcher
from verifybot.environment import Environment
from verifybot.repositories.guild_settings import create_guild_settings_repository
from verifybot.services.guild_settings import GuildSettingsService
from verifybot.services.roles import RoleService
from verifybot.services.verification import VerificationService
from verifybot.services.voice import RetryPolicy, VoiceSessionController
from verifybot.services.voice_transport import DiscordVoiceTransport

logger = logging.getLogger(__name__)


class BotBehavior:
    """Builds the services from the environment and attaches them to the bot."""

    def __init__(self, bot, env: Environment):
        self.bot = bot
        self.env = env

        self._settings_repository = create_guild_settings_repository(env.settings_backend, env.settings_path)
        self._settings_service = GuildSettingsService(self._settings_repository)
        self._verification_service = VerificationService(
            self._settings_service,
            enforce_channel=env.verify_enforce_channel,
        )
        self._role_service = RoleService(role_name=env.verified_role_name)
        self._voice_controller = VoiceSessionController(
            DiscordVoiceTransport(bot),
            connect_timeout=env.voice_connect_timeout,
            grace_period=env.voice_grace_period,
            retry_policy=RetryPolicy(
                base_delay=env.voice_retry_delay,
                multiplier=env.voice_retry_backoff,
                max_delay=env.voice_retry_max_delay,
                max_attempts=env.voice_max_retries,
            ),
        )
        self._dispatcher = CommandDispatcher(
            self._settings_service,
            self._verification_service,
            self._role_service,
            self._voice_controller,
        )

        # Cross-link dependencies
        self._voice_controller.set_abandon_callback(self._dispatcher.notify_voice_abandoned)
        bot.behavior = self

        logger.info(f"Settings backend: {env.settings_backend} ({env.settings_path})")

    @property
    def settings_service(self) -> GuildSettingsService: return self._settings_service

    @property
    def verification_service(self) -> VerificationService: return self._verification_service

    @property
    def role_service(self) -> RoleService: return self._role_service

    @property
    def voice_controller(self) -> VoiceSessionController: return self._voice_controller

    @property
    def dispatcher(self) -> CommandDispatcher: return self._dispatcher

    def load_cogs(self):
        """Register the command cogs on the bot."""
        from verifybot.commands import verification, voice

        for module in (verification, voice):
            module.setup(self.bot, self)
            logger.info(f"Loaded {module.__name__}")

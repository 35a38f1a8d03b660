"""
Command dispatcher.

Routes slash commands and guild messages to the services and produces the
single reply each interaction is owed. Every command is acknowledged with
a deferred ephemeral response before any slow work (role creation,
nickname changes, voice connects) starts; the final text is then sent as
one follow-up.
"""

import logging
from dataclasses import dataclass, field
from typing import Any, Awaitable, Callable, Dict, Optional

import discord

from verifybot import config
from verifybot.errors import (
    BotError,
    ConfigurationError,
    ConnectError,
    InvalidUsernameError,
    PermissionDenied,
    PersistenceError,
    PolicyRejection,
)
from verifybot.models.guild_settings import GuildSettings
from verifybot.models.verification import RejectionReason
from verifybot.models.voice_session import AbandonReason, VoiceSession
from verifybot.services.guild_settings import GuildSettingsService
from verifybot.services.roles import RoleService
from verifybot.services.verification import VerificationService
from verifybot.services.voice import VoiceSessionController

logger = logging.getLogger(__name__)

GENERIC_ERROR = "❌ Something went wrong. Please try again later."
GUILD_ONLY = "This command can only be used inside a server."


@dataclass
class CommandRequest:
    """Guild-scoped view of one slash command invocation."""

    guild: Any
    channel: Any
    member: Any
    options: Dict[str, Any] = field(default_factory=dict)

    @classmethod
    def from_context(cls, ctx: discord.ApplicationContext, **options) -> "CommandRequest":
        return cls(guild=ctx.guild, channel=ctx.channel, member=ctx.author, options=options)

    @property
    def guild_id(self) -> str:
        return str(self.guild.id)

    @property
    def channel_id(self) -> str:
        return str(self.channel.id)

    @property
    def is_guild_owner(self) -> bool:
        return self.guild.owner_id == self.member.id


class CommandDispatcher:
    """Stateless router from command names to service calls."""

    def __init__(
        self,
        settings_service: GuildSettingsService,
        verification_service: VerificationService,
        role_service: RoleService,
        voice_controller: VoiceSessionController,
    ):
        self.settings = settings_service
        self.verification = verification_service
        self.roles = role_service
        self.voice = voice_controller

        self._routes: Dict[str, Callable[[CommandRequest], Awaitable[str]]] = {
            "verify": self._verify,
            "setverifychannel": self._set_verify_channel,
            "pauseverify": self._pause_verify,
            "resumeverify": self._resume_verify,
            "joinvc": self._join_voice,
            "leavevc": self._leave_voice,
        }

    async def dispatch(self, ctx: discord.ApplicationContext, command_name: str, **options) -> Optional[str]:
        """
        Acknowledge, run and answer one slash command.

        Returns the reply text, or None when the interaction could not be
        acknowledged (it has expired and cannot be answered any more).
        """
        try:
            await ctx.defer(ephemeral=True)
        except discord.HTTPException as e:
            logger.warning(f"Could not acknowledge /{command_name}, abandoning request: {e}")
            return None

        if ctx.guild is None:
            text = GUILD_ONLY
        else:
            handler = self._routes.get(command_name)
            if handler is None:
                logger.warning(f"No route for command /{command_name}")
                text = GENERIC_ERROR
            else:
                request = CommandRequest.from_context(ctx, **options)
                text = await self._run(command_name, handler, request)

        await self._reply(ctx, text)
        return text

    async def _run(self, command_name: str, handler, request: CommandRequest) -> str:
        try:
            return await handler(request)
        except BotError as e:
            logger.log(e.log_level, f"/{command_name} in guild {request.guild_id}: {e}")
            return e.user_message
        except Exception:
            logger.exception(f"Unexpected error handling /{command_name} in guild {request.guild_id}")
            return GENERIC_ERROR

    async def _reply(self, ctx: discord.ApplicationContext, text: str):
        try:
            await ctx.followup.send(text, ephemeral=True)
        except discord.HTTPException as e:
            logger.warning(f"Could not deliver command reply: {e}")

    # ------------------------------------------------------------------
    # Verification commands
    # ------------------------------------------------------------------

    def _rejection_error(self, reason: RejectionReason, settings: GuildSettings) -> BotError:
        if reason is RejectionReason.NOT_CONFIGURED:
            return ConfigurationError("verify channel not configured")
        if reason is RejectionReason.PAUSED:
            return PolicyRejection("verification paused", user_message="⏸ Verification is paused right now.")
        return PolicyRejection(
            "wrong channel",
            user_message=f"⛔ Please use `/verify` in <#{settings.verify_channel_id}>.",
        )

    async def _verify(self, request: CommandRequest) -> str:
        username = str(request.options.get("username") or "").strip()
        settings = self.settings.get(request.guild_id)
        outcome = self.verification.attempt_verify(
            request.guild_id,
            request.member.id,
            username,
            is_guild_owner=request.is_guild_owner,
            is_in_configured_channel=settings.verify_channel_id == request.channel_id,
        )
        if not outcome.approved:
            raise self._rejection_error(outcome.reason, settings)
        if not self.verification.is_valid_username(username):
            raise InvalidUsernameError(f"invalid username {username!r}")

        role = await self.roles.ensure_verified_role(request.guild)
        try:
            granted = await self.roles.assign_role(request.member, role)
        except PermissionDenied as e:
            logger.warning(f"Role assignment failed in guild {request.guild_id}: {e}")
            return e.user_message

        lines = [f"✅ Verified as **{username}**." if granted else f"✅ You're already verified as **{username}**."]
        if outcome.should_rename_target:
            try:
                nickname = await self.roles.set_nickname(request.member, username)
                lines.append(f"📝 Nickname set to **{nickname}**.")
            except PermissionDenied as e:
                logger.warning(f"Nickname change failed in guild {request.guild_id}: {e}")
                lines.append(e.user_message)
        else:
            lines.append("ℹ️ You own this server, and Discord doesn't let bots rename the owner. Please set your nickname yourself.")

        logger.info(f"Verified {request.member.id} as {username} in guild {request.guild_id}")
        return "\n".join(lines)

    async def _set_verify_channel(self, request: CommandRequest) -> str:
        self.verification.configure_channel(request.guild_id, request.channel_id)
        return f"✅ Verify channel set to <#{request.channel_id}>. Members can now use `/verify` here."

    async def _pause_verify(self, request: CommandRequest) -> str:
        self.verification.pause(request.guild_id)
        return "⏸ Verification paused."

    async def _resume_verify(self, request: CommandRequest) -> str:
        settings = self.verification.resume(request.guild_id)
        if not settings.is_configured:
            return "▶️ Verification resumed, but no verify channel is set. Run `/setverifychannel` in the channel to use."
        return "▶️ Verification resumed."

    # ------------------------------------------------------------------
    # Voice commands
    # ------------------------------------------------------------------

    async def _join_voice(self, request: CommandRequest) -> str:
        channel = request.options.get("channel")
        if channel is None:
            voice_state = getattr(request.member, "voice", None)
            channel = voice_state.channel if voice_state else None
        if channel is None:
            raise ConfigurationError(
                "no voice channel",
                user_message="⚠️ Join a voice channel first, or pick one with the `channel` option.",
            )

        try:
            await self.voice.join(request.guild_id, channel, origin=request.channel)
        except ConnectError as e:
            logger.warning(f"Voice join failed in guild {request.guild_id}: {e}")
            return f"{e.user_message}\n{config.VOICE_TROUBLESHOOTING_HINT}"

        try:
            self.settings.set_voice_channel(request.guild_id, channel.id)
        except PersistenceError as e:
            logger.error(f"Could not remember voice channel for guild {request.guild_id}: {e}")
            return f"🔊 Joined <#{channel.id}>, but I couldn't save it, so I won't rejoin after a restart."
        return f"🔊 Joined <#{channel.id}>. I'll stay here and rejoin after restarts."

    async def _leave_voice(self, request: CommandRequest) -> str:
        left = await self.voice.leave(request.guild_id)
        try:
            self.settings.clear_voice_channel(request.guild_id)
        except PersistenceError as e:
            logger.error(f"Could not forget voice channel for guild {request.guild_id}: {e}")
            if left:
                return "👋 Left the voice channel, but I couldn't save that, so I may rejoin after a restart."
        if not left:
            return "I'm not in a voice channel."
        return "👋 Left the voice channel."

    # ------------------------------------------------------------------
    # Events
    # ------------------------------------------------------------------

    async def handle_message(self, message: discord.Message) -> bool:
        """Remove a stray message from the verify channel. Returns True if removed."""
        if message.guild is None:
            return False
        if not self.verification.should_moderate_message(message.guild.id, message.channel.id, message.author.bot):
            return False

        try:
            await message.delete()
        except discord.NotFound:
            return False
        except discord.Forbidden:
            logger.warning(f"Missing Manage Messages in verify channel {message.channel.id} of guild {message.guild.id}")
            return False

        try:
            await message.author.send(
                f"👋 Only `/verify <minecraft username>` can be used in {message.channel.mention}, "
                "so your message was removed."
            )
        except discord.HTTPException as e:
            logger.debug(f"Could not DM {message.author.id}: {e}")
        return True

    async def notify_voice_abandoned(self, session: VoiceSession, reason: AbandonReason):
        """Tell the channel that requested the join that the bot gave up."""
        if reason is AbandonReason.CHANNEL_GONE:
            try:
                self.settings.clear_voice_channel(session.guild_id)
            except PersistenceError as e:
                logger.error(f"Could not forget voice channel for guild {session.guild_id}: {e}")
            text = f"🔇 The voice channel <#{session.channel_id}> no longer exists, so I stopped reconnecting."
        else:
            text = (
                f"🔇 Lost the connection to <#{session.channel_id}> and gave up after "
                f"{self.voice.retry_policy.max_attempts} reconnect attempts. Use `/joinvc` to try again."
            )

        if session.origin is None:
            return
        try:
            await session.origin.send(text)
        except discord.HTTPException as e:
            logger.warning(f"Could not report abandoned voice session in guild {session.guild_id}: {e}")

"""
Verification policy.

Decides whether a verification request is eligible and whether a posted
message should be moderated. The Discord side effects (role, nickname,
message deletion) are carried out by the dispatcher so this stays
testable without a gateway connection.
"""

import logging
import re

from verifybot import config
from verifybot.models.guild_settings import GuildSettings
from verifybot.models.verification import RejectionReason, VerifyOutcome
from verifybot.services.guild_settings import GuildSettingsService

logger = logging.getLogger(__name__)

_USERNAME_RE = re.compile(config.MINECRAFT_USERNAME_PATTERN)


class VerificationService:
    """Per-guild verification configuration and eligibility rules."""

    def __init__(self, settings_service: GuildSettingsService, enforce_channel: bool = config.VERIFY_ENFORCE_CHANNEL):
        self.settings = settings_service
        self.enforce_channel = enforce_channel

    def configure_channel(self, guild_id: int | str, channel_id: int | str) -> GuildSettings:
        """Set the verify channel and clear the pause flag."""
        return self.settings.set_verify_channel(guild_id, channel_id)

    def pause(self, guild_id: int | str) -> GuildSettings:
        return self.settings.set_paused(guild_id, True)

    def resume(self, guild_id: int | str) -> GuildSettings:
        return self.settings.set_paused(guild_id, False)

    @staticmethod
    def is_valid_username(username: str) -> bool:
        return bool(username) and _USERNAME_RE.match(username) is not None

    def attempt_verify(
        self,
        guild_id: int | str,
        requester_id: int | str,
        username: str,
        is_guild_owner: bool,
        is_in_configured_channel: bool,
    ) -> VerifyOutcome:
        """
        Decide whether a verification request may proceed.

        Rejections are checked in order: not configured, paused, wrong
        channel (only when the channel restriction is enforced). Approved
        requests from the guild owner are flagged so no rename is
        attempted, since Discord never lets a bot rename the owner.
        """
        settings = self.settings.get(guild_id)

        if not settings.is_configured:
            outcome = VerifyOutcome.reject(RejectionReason.NOT_CONFIGURED)
        elif settings.verify_paused:
            outcome = VerifyOutcome.reject(RejectionReason.PAUSED)
        elif self.enforce_channel and not is_in_configured_channel:
            outcome = VerifyOutcome.reject(RejectionReason.WRONG_CHANNEL)
        else:
            outcome = VerifyOutcome.approve(should_rename_target=not is_guild_owner)

        logger.debug(
            f"Verify request in guild {guild_id} by {requester_id} as {username!r}: "
            f"{'approved' if outcome.approved else outcome.reason.value}"
        )
        return outcome

    def should_moderate_message(self, guild_id: int | str, channel_id: int | str, is_bot: bool) -> bool:
        """Return True if a message posted in this channel should be removed."""
        if is_bot:
            return False
        settings = self.settings.get(guild_id)
        return (
            settings.is_configured
            and not settings.verify_paused
            and settings.verify_channel_id == str(channel_id)
        )

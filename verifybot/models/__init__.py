"""
Data models (DTOs) for the verify bot.

These dataclasses provide type-safe representations of persisted guild
settings, verification decisions and in-memory voice sessions.
"""

from verifybot.models.guild_settings import GuildSettings
from verifybot.models.verification import RejectionReason, VerifyOutcome
from verifybot.models.voice_session import AbandonReason, SessionState, VoiceSession

__all__ = [
    "GuildSettings",
    "RejectionReason",
    "VerifyOutcome",
    "AbandonReason",
    "SessionState",
    "VoiceSession",
]

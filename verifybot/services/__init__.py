"""
Service layer providing business logic.

Services encapsulate business operations and coordinate between
repositories, the Discord API and each other.
"""

from verifybot.services.guild_settings import GuildSettingsService
from verifybot.services.verification import VerificationService
from verifybot.services.roles import RoleService
from verifybot.services.voice import RetryPolicy, VoiceSessionController
from verifybot.services.voice_transport import DiscordVoiceTransport, VoiceTransport

__all__ = [
    "GuildSettingsService",
    "VerificationService",
    "RoleService",
    "RetryPolicy",
    "VoiceSessionController",
    "DiscordVoiceTransport",
    "VoiceTransport",
]

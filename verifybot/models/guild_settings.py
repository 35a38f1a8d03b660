"""
Guild settings model for per-server configuration.
"""

from dataclasses import dataclass
from datetime import datetime
from typing import Any, Dict, Optional


@dataclass
class GuildSettings:
    """Verification and voice configuration for a Discord guild."""

    guild_id: str
    verify_channel_id: Optional[str] = None
    verify_paused: bool = False
    voice_channel_id: Optional[str] = None
    updated_at: Optional[datetime] = None

    @property
    def is_configured(self) -> bool:
        return self.verify_channel_id is not None

    def to_dict(self) -> Dict[str, Any]:
        """Serialize to the settings document shape (guild id is the key)."""
        data: Dict[str, Any] = {
            "verifyChannelId": self.verify_channel_id,
            "verifyPaused": self.verify_paused,
            "voiceChannelId": self.voice_channel_id,
        }
        if self.updated_at:
            data["updatedAt"] = self.updated_at.isoformat(timespec="seconds")
        return data

    @classmethod
    def from_dict(cls, guild_id: str, data: Dict[str, Any]) -> "GuildSettings":
        """
        Build settings from a settings document entry.

        Documents written by older releases stored the pause flag as
        ``paused``; it is still honoured when ``verifyPaused`` is absent.
        """
        paused = data.get("verifyPaused", data.get("paused", False))
        updated_at = None
        if data.get("updatedAt"):
            try:
                updated_at = datetime.fromisoformat(str(data["updatedAt"]))
            except ValueError:
                updated_at = None

        return cls(
            guild_id=str(guild_id),
            verify_channel_id=_optional_id(data.get("verifyChannelId")),
            verify_paused=bool(paused),
            voice_channel_id=_optional_id(data.get("voiceChannelId")),
            updated_at=updated_at,
        )


def _optional_id(value: Any) -> Optional[str]:
    return str(value) if value else None

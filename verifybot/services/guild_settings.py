"""
Service for guild-level verification and voice configuration.
"""

import logging
from dataclasses import replace
from datetime import datetime
from typing import Optional

from verifybot.errors import PersistenceError
from verifybot.models.guild_settings import GuildSettings
from verifybot.repositories.base import BaseRepository

logger = logging.getLogger(__name__)


class GuildSettingsService:
    """
    Business logic wrapper for guild settings operations.

    Every mutation is a read-modify-write against the repository within a
    single call. Overlapping requests for the same guild are not
    serialized; the last write wins.
    """

    def __init__(self, repo: BaseRepository[GuildSettings]):
        self.repo = repo

    def get(self, guild_id: int | str) -> GuildSettings:
        """Get guild settings, creating and persisting defaults when missing."""
        gid = str(guild_id)
        settings = self.repo.get_by_id(gid)
        if settings is not None:
            return settings

        settings = GuildSettings(guild_id=gid, updated_at=datetime.now().replace(microsecond=0))
        try:
            self.repo.save(settings)
        except PersistenceError as e:
            # Reads must keep working on a read-only store.
            logger.warning(f"Could not persist default settings for guild {gid}: {e}")
        return settings

    def update(self, guild_id: int | str, **changes) -> GuildSettings:
        """Apply field changes to a guild's settings and persist them."""
        current = self.get(guild_id)
        updated = replace(current, updated_at=datetime.now().replace(microsecond=0), **changes)
        self.repo.save(updated)
        logger.info(f"Guild {updated.guild_id} settings updated: {', '.join(sorted(changes))}")
        return updated

    def set_verify_channel(self, guild_id: int | str, channel_id: int | str) -> GuildSettings:
        """Set the verify channel; configuring a channel always unpauses."""
        return self.update(guild_id, verify_channel_id=str(channel_id), verify_paused=False)

    def set_paused(self, guild_id: int | str, paused: bool) -> GuildSettings:
        """Set the verification pause flag."""
        return self.update(guild_id, verify_paused=paused)

    def set_voice_channel(self, guild_id: int | str, channel_id: Optional[int | str]) -> GuildSettings:
        """Remember the voice channel the bot should stay in."""
        return self.update(guild_id, voice_channel_id=str(channel_id) if channel_id else None)

    def clear_voice_channel(self, guild_id: int | str) -> GuildSettings:
        """Forget the remembered voice channel."""
        return self.set_voice_channel(guild_id, None)

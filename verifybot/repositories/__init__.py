"""
Repository layer for data access.

Repositories provide an abstraction over the settings storage, enabling:
- Single Responsibility: Each repository handles one entity type
- Testability: Can be swapped for a temporary file or in-memory database
- Consistency: Standardized get/save operations
"""

from verifybot.repositories.base import BaseRepository, SqliteRepository
from verifybot.repositories.guild_settings import (
    JsonGuildSettingsRepository,
    SqliteGuildSettingsRepository,
    create_guild_settings_repository,
)

__all__ = [
    "BaseRepository",
    "SqliteRepository",
    "JsonGuildSettingsRepository",
    "SqliteGuildSettingsRepository",
    "create_guild_settings_repository",
]

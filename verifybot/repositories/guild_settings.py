"""
Guild settings repositories for per-guild configuration persistence.

Two backends implement the same contract:

- JsonGuildSettingsRepository: a single JSON document mapping guild ID to
  settings, read fully and rewritten fully on every call (default).
- SqliteGuildSettingsRepository: a ``guild_settings`` table.
"""

from datetime import datetime
from typing import Any, Dict, List, Optional
import json
import logging
import os
import sqlite3
import tempfile

from verifybot import config
from verifybot.errors import PersistenceError
from verifybot.models.guild_settings import GuildSettings
from verifybot.repositories.base import BaseRepository, SqliteRepository

logger = logging.getLogger(__name__)


class JsonGuildSettingsRepository(BaseRepository[GuildSettings]):
    """
    Repository for guild settings stored in one JSON document.

    Nothing is cached between calls, so edits made to the file by hand are
    picked up on the next read.
    """

    def __init__(self, path: Optional[str] = None):
        self._path = str(path or config.SETTINGS_FILE)
        self._corrupt = False

    def _load(self) -> Dict[str, Any]:
        """Read the whole document; a missing or corrupt file reads as empty."""
        self._corrupt = False
        try:
            with open(self._path, "r", encoding="utf-8") as handle:
                document = json.load(handle)
        except FileNotFoundError:
            return {}
        except (OSError, ValueError) as e:
            logger.error(f"Settings file {self._path} is unreadable, treating it as empty: {e}")
            self._corrupt = True
            return {}

        if not isinstance(document, dict):
            logger.error(f"Settings file {self._path} does not hold an object, treating it as empty")
            self._corrupt = True
            return {}
        return document

    def _write(self, document: Dict[str, Any]):
        """Atomically replace the document on disk."""
        directory = os.path.dirname(os.path.abspath(self._path))
        tmp_path = None
        try:
            os.makedirs(directory, exist_ok=True)
            if self._corrupt and os.path.exists(self._path):
                backup = f"{self._path}.corrupt-{datetime.now().strftime('%Y%m%d%H%M%S')}"
                os.replace(self._path, backup)
                logger.warning(f"Moved corrupt settings file aside to {backup}")
                self._corrupt = False

            with tempfile.NamedTemporaryFile(
                "w", encoding="utf-8", dir=directory, prefix=".settings-", suffix=".tmp", delete=False
            ) as handle:
                tmp_path = handle.name
                json.dump(document, handle, indent=2, sort_keys=True)
                handle.flush()
                os.fsync(handle.fileno())
            os.replace(tmp_path, self._path)
        except OSError as e:
            if tmp_path and os.path.exists(tmp_path):
                os.unlink(tmp_path)
            raise PersistenceError(f"Could not write settings file {self._path}: {e}") from e

    def get_by_id(self, id: Any) -> Optional[GuildSettings]:
        """Get settings for a guild, or None if it has no entry."""
        entry = self._load().get(str(id))
        if not isinstance(entry, dict):
            return None
        return GuildSettings.from_dict(str(id), entry)

    def get_all(self, limit: int = 100) -> List[GuildSettings]:
        """Get settings for every guild in the document."""
        document = self._load()
        settings = [
            GuildSettings.from_dict(guild_id, entry)
            for guild_id, entry in document.items()
            if isinstance(entry, dict)
        ]
        return settings[:limit]

    def save(self, entity: GuildSettings) -> GuildSettings:
        """Replace one guild's entry and rewrite the whole document."""
        document = self._load()
        document[str(entity.guild_id)] = entity.to_dict()
        self._write(document)
        return entity


class SqliteGuildSettingsRepository(SqliteRepository[GuildSettings]):
    """Repository for guild settings stored in SQLite."""

    def __init__(self, db_path: Optional[str] = None, use_shared: bool = True):
        super().__init__(db_path=db_path, use_shared=use_shared)
        self.ensure_schema()

    def ensure_schema(self):
        """Create the guild_settings table if it does not exist."""
        try:
            self._execute_write(
                """
                CREATE TABLE IF NOT EXISTS guild_settings (
                    guild_id TEXT PRIMARY KEY,
                    verify_channel_id TEXT,
                    verify_paused INTEGER NOT NULL DEFAULT 0 CHECK (verify_paused IN (0,1)),
                    voice_channel_id TEXT,
                    updated_at DATETIME DEFAULT CURRENT_TIMESTAMP
                )
                """
            )
        except sqlite3.Error as e:
            raise PersistenceError(f"Could not create guild_settings table: {e}") from e

    def _row_to_entity(self, row: sqlite3.Row) -> GuildSettings:
        """Convert a database row to a GuildSettings entity."""
        updated_at = None
        if row["updated_at"]:
            try:
                updated_at = datetime.fromisoformat(str(row["updated_at"]).replace(" ", "T"))
            except ValueError:
                updated_at = None

        return GuildSettings(
            guild_id=str(row["guild_id"]),
            verify_channel_id=str(row["verify_channel_id"]) if row["verify_channel_id"] else None,
            verify_paused=bool(row["verify_paused"]),
            voice_channel_id=str(row["voice_channel_id"]) if row["voice_channel_id"] else None,
            updated_at=updated_at,
        )

    def get_by_id(self, id: Any) -> Optional[GuildSettings]:
        """Get settings for a specific guild."""
        try:
            row = self._execute_one(
                "SELECT * FROM guild_settings WHERE guild_id = ?",
                (str(id),),
            )
        except sqlite3.Error as e:
            logger.error(f"Could not read settings for guild {id}: {e}")
            return None
        return self._row_to_entity(row) if row else None

    def get_all(self, limit: int = 100) -> List[GuildSettings]:
        """Get all guild settings."""
        rows = self._execute(
            "SELECT * FROM guild_settings ORDER BY updated_at DESC LIMIT ?",
            (limit,),
        )
        return [self._row_to_entity(row) for row in rows]

    def save(self, entity: GuildSettings) -> GuildSettings:
        """Insert or update a guild's settings row."""
        updated_at = entity.updated_at or datetime.now()
        try:
            self._execute_write(
                """
                INSERT INTO guild_settings (
                    guild_id, verify_channel_id, verify_paused, voice_channel_id, updated_at
                ) VALUES (?, ?, ?, ?, ?)
                ON CONFLICT(guild_id) DO UPDATE SET
                    verify_channel_id = excluded.verify_channel_id,
                    verify_paused = excluded.verify_paused,
                    voice_channel_id = excluded.voice_channel_id,
                    updated_at = excluded.updated_at
                """,
                (
                    str(entity.guild_id),
                    entity.verify_channel_id,
                    1 if entity.verify_paused else 0,
                    entity.voice_channel_id,
                    updated_at.strftime("%Y-%m-%d %H:%M:%S"),
                ),
            )
        except sqlite3.Error as e:
            raise PersistenceError(f"Could not save settings for guild {entity.guild_id}: {e}") from e
        return entity


def create_guild_settings_repository(backend: str = config.DEFAULT_SETTINGS_BACKEND,
                                     path: Optional[str] = None) -> BaseRepository[GuildSettings]:
    """Build the settings repository for the configured backend."""
    backend = (backend or config.DEFAULT_SETTINGS_BACKEND).lower()
    if backend == "json":
        return JsonGuildSettingsRepository(path or config.SETTINGS_FILE)
    if backend == "sqlite":
        return SqliteGuildSettingsRepository(db_path=str(path or config.SETTINGS_DATABASE), use_shared=False)
    raise ValueError(f"Unsupported settings backend: {backend}")

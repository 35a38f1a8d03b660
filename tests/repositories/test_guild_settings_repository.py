"""
Tests for verifybot/repositories/guild_settings.py - JSON and SQLite backends.
"""

import json
import os

import pytest

from verifybot.errors import PersistenceError
from verifybot.models.guild_settings import GuildSettings
from verifybot.repositories.guild_settings import (
    JsonGuildSettingsRepository,
    SqliteGuildSettingsRepository,
    create_guild_settings_repository,
)


class TestJsonGuildSettingsRepository:
    """Tests for the JSON document backend."""

    def test_missing_file_reads_as_empty(self, json_settings_repository):
        assert json_settings_repository.get_by_id("1") is None
        assert json_settings_repository.get_all() == []

    def test_save_creates_directory_and_document(self, json_settings_repository, settings_path):
        json_settings_repository.save(GuildSettings(guild_id="1", verify_channel_id="C1"))

        with open(settings_path, encoding="utf-8") as handle:
            document = json.load(handle)
        assert document == {"1": {"verifyChannelId": "C1", "verifyPaused": False, "voiceChannelId": None}}

    def test_save_keeps_other_guilds(self, json_settings_repository):
        json_settings_repository.save(GuildSettings(guild_id="1", verify_channel_id="C1"))
        json_settings_repository.save(GuildSettings(guild_id="2", verify_paused=True))

        assert json_settings_repository.get_by_id("1").verify_channel_id == "C1"
        assert json_settings_repository.get_by_id("2").verify_paused is True
        assert {s.guild_id for s in json_settings_repository.get_all()} == {"1", "2"}

    def test_reads_reflect_external_edits(self, json_settings_repository, settings_path):
        json_settings_repository.save(GuildSettings(guild_id="1", verify_channel_id="C1"))

        with open(settings_path, "w", encoding="utf-8") as handle:
            json.dump({"1": {"verifyChannelId": "C7", "paused": True}}, handle)

        settings = json_settings_repository.get_by_id("1")
        assert settings.verify_channel_id == "C7"
        assert settings.verify_paused is True

    def test_corrupt_document_is_moved_aside_on_save(self, json_settings_repository, settings_path):
        os.makedirs(settings_path.parent, exist_ok=True)
        settings_path.write_text("{not json", encoding="utf-8")

        assert json_settings_repository.get_by_id("1") is None
        json_settings_repository.save(GuildSettings(guild_id="1", verify_channel_id="C1"))

        backups = [name for name in os.listdir(settings_path.parent) if ".corrupt-" in name]
        assert len(backups) == 1
        assert json_settings_repository.get_by_id("1").verify_channel_id == "C1"

    def test_unwritable_location_raises_persistence_error(self, tmp_path):
        blocker = tmp_path / "blocker"
        blocker.write_text("a file, not a directory", encoding="utf-8")
        repo = JsonGuildSettingsRepository(str(blocker / "settings.json"))

        with pytest.raises(PersistenceError):
            repo.save(GuildSettings(guild_id="1"))

    def test_no_temp_files_left_behind(self, json_settings_repository, settings_path):
        json_settings_repository.save(GuildSettings(guild_id="1"))
        json_settings_repository.save(GuildSettings(guild_id="1", verify_paused=True))

        assert os.listdir(settings_path.parent) == ["settings.json"]


class TestSqliteGuildSettingsRepository:
    """Tests for the SQLite backend."""

    def test_save_and_get(self, sqlite_settings_repository):
        sqlite_settings_repository.save(GuildSettings(guild_id="123", verify_channel_id="10", voice_channel_id="20"))

        settings = sqlite_settings_repository.get_by_id("123")
        assert settings is not None
        assert settings.guild_id == "123"
        assert settings.verify_channel_id == "10"
        assert settings.verify_paused is False
        assert settings.voice_channel_id == "20"
        assert settings.updated_at is not None

    def test_save_updates_existing_row(self, sqlite_settings_repository):
        sqlite_settings_repository.save(GuildSettings(guild_id="456", verify_channel_id="10", voice_channel_id="20"))
        sqlite_settings_repository.save(GuildSettings(guild_id="456", verify_channel_id="11", verify_paused=True))

        settings = sqlite_settings_repository.get_by_id("456")
        assert settings.verify_channel_id == "11"
        assert settings.verify_paused is True
        assert settings.voice_channel_id is None
        assert len(sqlite_settings_repository.get_all()) == 1

    def test_missing_guild_returns_none(self, sqlite_settings_repository):
        assert sqlite_settings_repository.get_by_id("789") is None

    def test_get_all_respects_limit(self, sqlite_settings_repository):
        for guild_id in ("1", "2", "3"):
            sqlite_settings_repository.save(GuildSettings(guild_id=guild_id))

        assert len(sqlite_settings_repository.get_all()) == 3
        assert len(sqlite_settings_repository.get_all(limit=2)) == 2

    def test_file_database(self, tmp_path):
        path = tmp_path / "nested" / "settings.db"
        repo = SqliteGuildSettingsRepository(db_path=str(path), use_shared=False)
        repo.save(GuildSettings(guild_id="1", verify_channel_id="C1"))

        reopened = SqliteGuildSettingsRepository(db_path=str(path), use_shared=False)
        assert reopened.get_by_id("1").verify_channel_id == "C1"


class TestRepositoryFactory:

    def test_json_backend(self, tmp_path):
        repo = create_guild_settings_repository("json", str(tmp_path / "s.json"))
        assert isinstance(repo, JsonGuildSettingsRepository)

    def test_sqlite_backend(self, tmp_path):
        repo = create_guild_settings_repository("SQLite", str(tmp_path / "s.db"))
        assert isinstance(repo, SqliteGuildSettingsRepository)

    def test_unknown_backend(self, tmp_path):
        with pytest.raises(ValueError):
            create_guild_settings_repository("redis", str(tmp_path / "s"))

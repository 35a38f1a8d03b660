"""
Shared pytest fixtures for verify bot tests.
"""

import asyncio
import os
import sqlite3
import sys
from types import SimpleNamespace
from unittest.mock import AsyncMock, Mock

import pytest

# Add project root to path
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from verifybot.services.voice_transport import VoiceTransport  # noqa: E402


# ============================================================================
# Database Fixtures
# ============================================================================

@pytest.fixture
def db_connection():
    """Create an in-memory SQLite database."""
    conn = sqlite3.connect(":memory:")
    conn.row_factory = sqlite3.Row
    yield conn
    conn.close()


@pytest.fixture
def sqlite_settings_repository(db_connection):
    """Create a SqliteGuildSettingsRepository on the shared in-memory database."""
    from verifybot.repositories.base import SqliteRepository
    from verifybot.repositories.guild_settings import SqliteGuildSettingsRepository

    SqliteRepository.set_shared_connection(db_connection, ":memory:")

    repo = SqliteGuildSettingsRepository(use_shared=True)
    yield repo

    SqliteRepository.clear_shared_connection()


@pytest.fixture
def settings_path(tmp_path):
    return tmp_path / "data" / "settings.json"


@pytest.fixture
def json_settings_repository(settings_path):
    from verifybot.repositories.guild_settings import JsonGuildSettingsRepository

    return JsonGuildSettingsRepository(str(settings_path))


@pytest.fixture
def settings_service(json_settings_repository):
    from verifybot.services.guild_settings import GuildSettingsService

    return GuildSettingsService(json_settings_repository)


@pytest.fixture
def verification_service(settings_service):
    from verifybot.services.verification import VerificationService

    return VerificationService(settings_service)


# ============================================================================
# Voice Fixtures
# ============================================================================

class FakeLink:
    """Stand-in for a py-cord VoiceClient."""

    def __init__(self, channel):
        self.channel = channel
        self.connected = True


class FakeVoiceTransport(VoiceTransport):
    """In-memory transport that records every call."""

    def __init__(self):
        self.channels = {}
        self.connects = []
        self.disconnects = []
        self.links = []
        self.connect_delay = 0.0
        self.fail_with = None

    def add_channel(self, channel_id: str, guild_id: str = "1"):
        channel = SimpleNamespace(id=int(channel_id), name=f"voice-{channel_id}", guild=SimpleNamespace(id=int(guild_id)))
        self.channels[str(channel_id)] = channel
        return channel

    async def connect(self, channel):
        self.connects.append(channel)
        if self.connect_delay:
            await asyncio.sleep(self.connect_delay)
        if self.fail_with is not None:
            raise self.fail_with
        link = FakeLink(channel)
        self.links.append(link)
        return link

    async def disconnect(self, guild_id, link=None):
        self.disconnects.append((guild_id, link))
        if link is None:
            return False
        link.connected = False
        return True

    def resolve_channel(self, guild_id, channel_id):
        return self.channels.get(str(channel_id))

    def is_connected(self, link):
        return link is not None and link.connected


@pytest.fixture
def voice_transport():
    return FakeVoiceTransport()


@pytest.fixture
def voice_controller(voice_transport):
    """Controller with short timings so state transitions happen within a test."""
    from verifybot.services.voice import RetryPolicy, VoiceSessionController

    return VoiceSessionController(
        voice_transport,
        connect_timeout=0.2,
        grace_period=0.05,
        retry_policy=RetryPolicy(base_delay=0.3, multiplier=2.0, max_delay=1.0, max_attempts=3),
        poll_interval=0.01,
    )


# ============================================================================
# Discord Object Fixtures
# ============================================================================

def make_member(member_id=100, roles=None, voice_channel=None):
    member = Mock()
    member.id = member_id
    member.roles = list(roles or [])
    member.add_roles = AsyncMock()
    member.edit = AsyncMock()
    member.send = AsyncMock()
    member.bot = False
    member.voice = SimpleNamespace(channel=voice_channel) if voice_channel else None
    return member


def make_guild(guild_id=1, owner_id=999, roles=None):
    guild = Mock()
    guild.id = guild_id
    guild.name = f"guild-{guild_id}"
    guild.owner_id = owner_id
    guild.roles = list(roles or [])
    guild.create_role = AsyncMock()
    return guild


def make_context(guild, channel_id=10, member=None):
    ctx = Mock()
    ctx.guild = guild
    ctx.channel = Mock()
    ctx.channel.id = channel_id
    ctx.channel.send = AsyncMock()
    ctx.author = member or make_member()
    ctx.defer = AsyncMock()
    ctx.followup = Mock()
    ctx.followup.send = AsyncMock()
    return ctx


def http_error(exc_type, status, text="error"):
    """Build a py-cord HTTPException subclass without a real HTTP response."""
    return exc_type(Mock(status=status, reason=text), text)

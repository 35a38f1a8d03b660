"""
Environment configuration loader.

This module loads environment variables from a .env file for bot
configuration, falling back to the defaults in `verifybot.config`.
"""

import logging
import os
from typing import List, Optional

from dotenv import load_dotenv

from verifybot import config

logger = logging.getLogger(__name__)


def _env_int(name: str, default: int) -> int:
    value = os.getenv(name)
    try:
        return int(value) if value else default
    except ValueError:
        logger.warning(f"Ignoring invalid integer for {name}: {value!r}")
        return default


def _env_float(name: str, default: float) -> float:
    value = os.getenv(name)
    try:
        return float(value) if value else default
    except ValueError:
        logger.warning(f"Ignoring invalid number for {name}: {value!r}")
        return default


def _env_bool(name: str, default: bool) -> bool:
    value = os.getenv(name)
    if value is None or value == "":
        return default
    return value.strip().lower() in ("1", "true", "yes", "on")


def _env_ids(name: str) -> List[int]:
    ids = []
    for part in (os.getenv(name) or "").split(","):
        part = part.strip()
        if part.isdigit():
            ids.append(int(part))
    return ids


class Environment:
    """
    Environment configuration container.

    Loads and provides access to environment variables
    needed for bot operation.

    Attributes:
        bot_token: Discord bot authentication token.
        port: Port for the health check server.
        settings_backend: "json" or "sqlite".
        settings_path: Settings file or database path.
        debug_guild_ids: Guilds to register slash commands in directly.
    """

    def __init__(self):
        """Load environment variables from .env file."""
        load_dotenv()
        self.bot_token: str = os.getenv('DISCORD_BOT_TOKEN', '')
        self.port: int = _env_int('PORT', config.WEB_PORT)

        self.settings_backend: str = os.getenv('SETTINGS_BACKEND', config.DEFAULT_SETTINGS_BACKEND).lower()
        default_path = config.SETTINGS_DATABASE if self.settings_backend == "sqlite" else config.SETTINGS_FILE
        self.settings_path: str = os.getenv('SETTINGS_PATH') or str(default_path)

        self.debug_guild_ids: List[int] = _env_ids('DEBUG_GUILD_IDS')
        self.verify_enforce_channel: bool = _env_bool('VERIFY_ENFORCE_CHANNEL', config.VERIFY_ENFORCE_CHANNEL)
        self.verified_role_name: str = os.getenv('VERIFIED_ROLE_NAME', config.VERIFIED_ROLE_NAME)

        self.voice_connect_timeout: float = _env_float('VOICE_CONNECT_TIMEOUT', config.VOICE_CONNECT_TIMEOUT)
        self.voice_grace_period: float = _env_float('VOICE_GRACE_PERIOD', config.VOICE_GRACE_PERIOD)
        self.voice_retry_delay: float = _env_float('VOICE_RETRY_DELAY', config.VOICE_RETRY_DELAY)
        self.voice_retry_backoff: float = _env_float('VOICE_RETRY_BACKOFF', config.VOICE_RETRY_BACKOFF)
        self.voice_retry_max_delay: float = _env_float('VOICE_RETRY_MAX_DELAY', config.VOICE_RETRY_MAX_DELAY)
        self.voice_max_retries: int = _env_int('VOICE_MAX_RETRIES', config.VOICE_MAX_RETRIES)
        self.voice_health_interval: float = _env_float('VOICE_HEALTH_INTERVAL', config.VOICE_HEALTH_INTERVAL)

        self.log_dir: Optional[str] = os.getenv('LOG_DIR') or None
        self.log_level: str = os.getenv('LOG_LEVEL', 'INFO').upper()

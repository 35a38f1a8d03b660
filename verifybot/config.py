"""
Centralized configuration for the verify bot.

This module contains the constants and defaults used across the codebase.
Values that operators are expected to change are read through
`verifybot.environment.Environment`, which falls back to these defaults.
"""

from pathlib import Path

# ============================================================================
# Paths
# ============================================================================

# Project root directory
PROJECT_ROOT = Path(__file__).parent.parent.absolute()

# Data directory
DATA_DIR = PROJECT_ROOT / "data"

# Settings document (JSON backend)
SETTINGS_FILE = DATA_DIR / "settings.json"

# Settings database (SQLite backend)
SETTINGS_DATABASE = DATA_DIR / "settings.db"

# Logs directory (file logging is only enabled when LOG_DIR is set)
LOGS_DIR = PROJECT_ROOT / "logs"


# ============================================================================
# Discord Configuration
# ============================================================================

# Bot command prefix (for text commands, if any)
COMMAND_PREFIX = "*"

# Role granted on successful verification
VERIFIED_ROLE_NAME = "Verified"
VERIFIED_ROLE_COLOR = 0x00FF00

# Discord rejects nicknames longer than this
MAX_NICKNAME_LENGTH = 32

# Minecraft Java usernames: 3-16 letters, digits or underscores
MINECRAFT_USERNAME_PATTERN = r"^[A-Za-z0-9_]{3,16}$"

# Only accept /verify inside the configured verify channel
VERIFY_ENFORCE_CHANNEL = True

# Supported settings backends
SETTINGS_BACKENDS = ("json", "sqlite")
DEFAULT_SETTINGS_BACKEND = "json"


# ============================================================================
# Voice Settings
# ============================================================================

# Seconds to wait for a voice connection to become ready
VOICE_CONNECT_TIMEOUT = 20.0

# Seconds to wait for the transport to heal itself after a disconnect
VOICE_GRACE_PERIOD = 5.0

# Reconnect backoff: first delay, growth factor and ceiling (seconds)
VOICE_RETRY_DELAY = 5.0
VOICE_RETRY_BACKOFF = 2.0
VOICE_RETRY_MAX_DELAY = 60.0

# Reconnect attempts before giving up (0 retries forever)
VOICE_MAX_RETRIES = 5

# Health monitor poll interval (seconds)
VOICE_HEALTH_INTERVAL = 5.0

# Shown when a voice connection cannot be established
VOICE_TROUBLESHOOTING_HINT = (
    "This is usually a network problem on the host: Discord voice needs "
    "outbound UDP (ports 50000-65535) to be allowed by the firewall."
)


# ============================================================================
# Web Interface Settings
# ============================================================================

# Health check server settings
WEB_HOST = '0.0.0.0'
WEB_PORT = 3000
HEALTH_RESPONSE = "Bot alive"


# ============================================================================
# Logging
# ============================================================================

LOG_FORMAT = '[%(asctime)s] [%(levelname)s] %(name)s: %(message)s'
LOG_DATE_FORMAT = '%Y-%m-%d %H:%M:%S'
LOG_BACKUP_DAYS = 30

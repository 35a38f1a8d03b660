"""
Error taxonomy for command handling.

Every error a command handler can anticipate derives from `BotError` and
carries the text shown to the requester. The dispatcher turns these into
a single reply; anything else is treated as an unexpected failure.
"""

import logging
from enum import Enum
from typing import Optional


class BotError(Exception):
    """Base class for errors that are reported back to the requester."""

    user_message = "❌ Something went wrong. Please try again later."
    log_level = logging.WARNING

    def __init__(self, message: Optional[str] = None, *, user_message: Optional[str] = None):
        super().__init__(message or user_message or self.user_message)
        if user_message is not None:
            self.user_message = user_message


class ConfigurationError(BotError):
    """The guild is missing configuration the command needs."""

    user_message = "⚠️ Verification isn't set up yet. An admin needs to run `/setverifychannel`."
    log_level = logging.INFO


class PolicyRejection(BotError):
    """The request was refused by policy (paused, wrong channel)."""

    user_message = "⛔ Verification isn't available right now."
    log_level = logging.DEBUG


class InvalidUsernameError(BotError):
    """The submitted Minecraft username is malformed."""

    user_message = "❌ That doesn't look like a Minecraft username (3-16 letters, numbers or `_`)."
    log_level = logging.DEBUG


class PermissionDenied(BotError):
    """Discord refused a role or nickname change."""

    user_message = "❌ I don't have permission to do that."


class PersistenceError(BotError):
    """Guild settings could not be written."""

    user_message = "❌ I couldn't save the settings. Please try again later."
    log_level = logging.ERROR


class TransientTransportError(BotError):
    """A voice transport failure that the caller may retry."""

    user_message = "❌ The voice connection failed."


class ConnectFailure(Enum):
    TIMEOUT = "timeout"
    FAILED = "failed"


class ConnectError(TransientTransportError):
    """Joining a voice channel did not produce a ready connection."""

    def __init__(self, reason: ConnectFailure, message: Optional[str] = None):
        self.reason = reason
        if reason is ConnectFailure.TIMEOUT:
            text = "❌ Timed out connecting to the voice channel."
        else:
            text = "❌ Couldn't connect to the voice channel."
        super().__init__(message or f"voice connect {reason.value}", user_message=text)

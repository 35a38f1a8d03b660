"""
Verify bot package - Minecraft username verification for Discord guilds.

This package contains the bot core, per-guild settings persistence,
the verification policy, the voice session controller and the slash
command cogs that tie them together.
"""

from verifybot.core import Bot
from verifybot.environment import Environment
from verifybot.behavior import BotBehavior

__version__ = "1.0.0"

__all__ = [
    'Bot',
    'Environment',
    'BotBehavior',
]

"""
Discord command cogs for the verify bot.

Cogs are py-cord's way of organizing commands into modular groups.
Each cog handles a specific category of functionality.
"""

from verifybot.commands.verification import VerificationCog
from verifybot.commands.voice import VoiceCog

__all__ = [
    "VerificationCog",
    "VoiceCog",
]

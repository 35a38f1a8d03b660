"""
Service for the Discord side effects of a successful verification.
"""

import logging

import discord

from verifybot import config
from verifybot.errors import PermissionDenied

logger = logging.getLogger(__name__)


class RoleService:
    """Creates and assigns the verified role and sets member nicknames."""

    def __init__(self, role_name: str = config.VERIFIED_ROLE_NAME, role_color: int = config.VERIFIED_ROLE_COLOR):
        self.role_name = role_name
        self.role_color = role_color

    async def ensure_verified_role(self, guild: discord.Guild) -> discord.Role:
        """Return the verified role, creating it if the guild has none."""
        role = discord.utils.get(guild.roles, name=self.role_name)
        if role is not None:
            return role

        try:
            role = await guild.create_role(
                name=self.role_name,
                colour=discord.Colour(self.role_color),
                reason="Verification role",
            )
        except discord.Forbidden as e:
            raise PermissionDenied(
                f"Cannot create role in guild {guild.id}: {e}",
                user_message=f"❌ I need the **Manage Roles** permission to create the **{self.role_name}** role.",
            ) from e
        logger.info(f"Created {self.role_name} role in {guild.name} ({guild.id})")
        return role

    async def assign_role(self, member: discord.Member, role: discord.Role) -> bool:
        """Give the member the role. Returns False if they already have it."""
        if role in member.roles:
            return False
        try:
            await member.add_roles(role, reason="Verified")
        except discord.Forbidden as e:
            raise PermissionDenied(
                f"Cannot assign {role.name} to {member.id}: {e}",
                user_message=(
                    f"❌ I couldn't give you the **{role.name}** role. "
                    f"Ask an admin to move my role above **{role.name}** in Server Settings → Roles."
                ),
            ) from e
        return True

    async def set_nickname(self, member: discord.Member, nickname: str) -> str:
        """Set the member's nickname, truncated to Discord's limit."""
        nickname = nickname[:config.MAX_NICKNAME_LENGTH]
        try:
            await member.edit(nick=nickname, reason="Verified")
        except discord.Forbidden as e:
            raise PermissionDenied(
                f"Cannot rename {member.id}: {e}",
                user_message=(
                    "⚠️ I couldn't change your nickname. I need **Manage Nicknames** "
                    "and my role must be above yours."
                ),
            ) from e
        return nickname

"""Admin cog: /sessions, /flush."""

import logging

import discord
from discord import app_commands
from discord.ext import commands

from .access import AccessPolicy
from .config import Config
from .provider import SessionProvider

log = logging.getLogger(__name__)


class AdminCog(commands.Cog):
    def __init__(
        self,
        bot: commands.Bot,
        config: Config,
        provider: SessionProvider,
        access: AccessPolicy,
    ) -> None:
        self.bot = bot
        self.config = config
        self.provider = provider
        self.access = access

    @app_commands.command(name="sessions", description="Show live session count")
    async def list_sessions(self, interaction: discord.Interaction) -> None:
        if not self.access.is_admin(interaction.user.id):
            await interaction.response.send_message("Not authorized.", ephemeral=True)
            return
        await interaction.response.send_message(
            f"**Live sessions**: {len(self.provider)}\n"
            f"**TTL**: {self.provider.ttl:.0f}s · "
            f"**Sweep**: every {self.provider.cleanup_interval:.0f}s"
        )

    @app_commands.command(name="flush", description="Drop all cached sessions")
    async def flush_sessions(self, interaction: discord.Interaction) -> None:
        if not self.access.is_admin(interaction.user.id):
            await interaction.response.send_message("Not authorized.", ephemeral=True)
            return
        count = len(self.provider)
        await self.provider.clear()
        log.info("Session cache flushed by %s", interaction.user.id)
        await interaction.response.send_message(f"Dropped {count} cached session(s).")


async def setup(bot: commands.Bot) -> None:
    config = bot.config  # type: ignore[attr-defined]
    provider = bot.provider  # type: ignore[attr-defined]
    access = bot.access  # type: ignore[attr-defined]
    await bot.add_cog(AdminCog(bot, config, provider, access))

"""ChatBridgeBot: commands.Bot subclass with shared state."""

import logging

import discord
from discord.ext import commands

from .access import AccessPolicy
from .config import Config
from .llm_client import OpenAIChatClient
from .messages import get_messages
from .provider import SessionProvider
from .storage import FileStorage

log = logging.getLogger(__name__)


class ChatBridgeBot(commands.Bot):
    """Discord bot that relays messages to a chat-completion model, one session per user and channel."""

    def __init__(self, config: Config) -> None:
        intents = discord.Intents.default()
        intents.message_content = True

        super().__init__(command_prefix="!", intents=intents)

        self.config = config
        self.access = AccessPolicy(config.allowed_users, config.admin_users)
        self.messages = get_messages(config.language)
        self.storage = FileStorage(config.db_dir)
        self.client = OpenAIChatClient(
            api_key=config.openai_api_key,
            base_url=config.openai_base_url,
            timeout_secs=config.request_timeout_secs,
        )
        self.provider = SessionProvider(
            client=self.client,
            storage=self.storage,
            params=config.request_params,
            ttl=config.cache_ttl_secs,
            cleanup_interval=config.cleanup_interval_secs,
            prices=config.prices,
        )

    async def setup_hook(self) -> None:
        self.provider.start()
        await self.load_extension("chat_bridge.cog_chat")
        await self.load_extension("chat_bridge.cog_admin")
        await self.tree.sync()
        log.info("Slash commands synced.")

    async def close(self) -> None:
        await self.provider.close()
        await self.client.aclose()
        await super().close()

    async def on_ready(self) -> None:
        log.info(
            "Bot '%s' ready as %s (ID: %s)",
            self.config.bot_name,
            self.user,
            self.user.id if self.user else "?",
        )
        log.info("Model: %s", self.config.model)
        log.info(
            "Allowed users: %d, admins: %d",
            len(self.access.allowed_users),
            len(self.access.admin_users),
        )
        log.info("Storage: %s", self.config.db_dir)

        for guild in self.guilds:
            self.tree.copy_global_to(guild=guild)
            await self.tree.sync(guild=guild)
            log.info("Synced commands to guild %s", guild.id)

"""Chat cog: relays messages to the model and exposes per-session commands."""

import io
import logging
import time

import discord
from discord import app_commands
from discord.ext import commands

from .access import AccessPolicy
from .config import Config
from .errors import ChatBridgeError
from .history import SessionID
from .message_splitter import split_message
from .messages import Messages
from .provider import SessionProvider
from .session import Session
from .statistics import utcnow

log = logging.getLogger(__name__)


class ChatCog(commands.Cog):
    """Bridges Discord messages to the chat-completion model."""

    def __init__(
        self,
        bot: commands.Bot,
        config: Config,
        provider: SessionProvider,
        access: AccessPolicy,
        messages: Messages,
    ) -> None:
        self.bot = bot
        self.config = config
        self.provider = provider
        self.access = access
        self.messages = messages

    @staticmethod
    def _get_chat_id(channel: discord.abc.Messageable) -> int:
        if isinstance(channel, discord.Thread):
            return channel.parent_id or channel.id
        return int(getattr(channel, "id", 0))

    def _session_id(self, user_id: int, channel: discord.abc.Messageable) -> SessionID:
        return SessionID(user=user_id, chat=self._get_chat_id(channel), model=self.config.model)

    def _error_text(self, error: Exception) -> str:
        return self.messages.unexpected_error.format(
            contact=self.config.admin_contact, error=str(error)[:300]
        )

    async def _check_allowed(self, interaction: discord.Interaction) -> bool:
        if self.access.is_allowed(interaction.user.id):
            return True
        await interaction.response.send_message(
            self.messages.not_allowed.format(
                user_id=interaction.user.id, contact=self.config.admin_contact
            ),
            ephemeral=True,
        )
        return False

    async def _interaction_session(self, interaction: discord.Interaction) -> Session:
        session_id = self._session_id(interaction.user.id, interaction.channel)  # type: ignore[arg-type]
        return await self.provider.provide_session(session_id)

    @commands.Cog.listener()
    async def on_message(self, message: discord.Message) -> None:
        if message.author.bot:
            return
        if message.content.startswith("/"):
            return
        if not self.access.is_allowed(message.author.id):
            await message.reply(
                self.messages.not_allowed.format(
                    user_id=message.author.id, contact=self.config.admin_contact
                ),
                mention_author=False,
            )
            return

        t0 = time.monotonic()
        log.info("Message started (ch=%d, msg=%d)", message.channel.id, message.id)
        try:
            await self._handle_message(message)
        except ChatBridgeError as e:
            log.error("Ask failed (ch=%d, msg=%d): %s", message.channel.id, message.id, e)
            await message.reply(self._error_text(e), mention_author=False)
        except Exception as e:
            log.exception("Unexpected error handling message")
            await message.reply(self._error_text(e), mention_author=False)
        finally:
            log.info(
                "Message finished (ch=%d, msg=%d): %.1fs",
                message.channel.id,
                message.id,
                time.monotonic() - t0,
            )

    async def _handle_message(self, message: discord.Message) -> None:
        prompt = message.content.strip()
        if not prompt:
            await message.reply(self.messages.not_supported, mention_author=False)
            return

        session = await self.provider.provide_session(
            self._session_id(message.author.id, message.channel)
        )

        async with message.channel.typing():
            reply = await session.ask(prompt)

        chunks = split_message(reply)
        await message.reply(chunks[0], mention_author=False)
        for chunk in chunks[1:]:
            await message.channel.send(chunk)

    @app_commands.command(name="help", description="Show the help message")
    async def show_help(self, interaction: discord.Interaction) -> None:
        if not await self._check_allowed(interaction):
            return
        commands_help = [
            ("help", self.messages.command_help),
            ("stats", self.messages.command_stats),
            ("restart", self.messages.command_restart),
            ("export", self.messages.command_export),
        ]
        lines = [self.messages.greeting.format(name=self.config.bot_name)]
        for name, description in commands_help:
            lines.append(f"/{name} — {description}\n\n")
        lines.append(self.messages.support.format(contact=self.config.admin_contact))
        await interaction.response.send_message("".join(lines))

    @app_commands.command(name="stats", description="Get usage statistics")
    async def show_stats(self, interaction: discord.Interaction) -> None:
        if not await self._check_allowed(interaction):
            return
        # the session may be busy with a model call for longer than the ack deadline
        await interaction.response.defer()
        try:
            session = await self._interaction_session(interaction)
            stats = await session.statistics()
        except ChatBridgeError as e:
            log.error("Statistics failed (user=%d): %s", interaction.user.id, e)
            await interaction.followup.send(self._error_text(e))
            return

        rate = self.config.rate
        await interaction.followup.send(
            self.messages.format_stats(
                self.config.currency,
                last=rate * stats.last_message,
                today=rate * stats.daily,
                month=rate * stats.month(utcnow().month),
                total=rate * stats.total,
            )
        )

    @app_commands.command(name="restart", description="Restart the conversation")
    @app_commands.describe(prompt="General instructions for the new conversation (optional)")
    async def restart(self, interaction: discord.Interaction, prompt: str | None = None) -> None:
        if not await self._check_allowed(interaction):
            return
        await interaction.response.defer()
        try:
            session = await self._interaction_session(interaction)
            await session.reset()
            if prompt:
                await session.set_prompt(prompt)
        except ChatBridgeError as e:
            log.error("Restart failed (user=%d): %s", interaction.user.id, e)
            await interaction.followup.send(self._error_text(e))
            return
        await interaction.followup.send(self.messages.done)

    @app_commands.command(name="export", description="Export conversation history")
    async def export_conversation(self, interaction: discord.Interaction) -> None:
        if not await self._check_allowed(interaction):
            return
        await interaction.response.defer()
        try:
            session = await self._interaction_session(interaction)
            history = await session.history()
        except ChatBridgeError as e:
            log.error("Export failed (user=%d): %s", interaction.user.id, e)
            await interaction.followup.send(self._error_text(e))
            return

        if not history.log:
            await interaction.followup.send(self.messages.nothing_to_export)
            return

        content = render_history(history.prompt, [(m.user, m.assistant) for m in history.log])
        file = discord.File(io.BytesIO(content.encode()), filename="conversation.md")
        await interaction.followup.send(file=file)


def render_history(prompt: str, exchanges: list[tuple[str, str]]) -> str:
    lines = ["# Conversation Export\n"]
    if prompt:
        lines.append(f"**System**: {prompt}\n")
    for i, (user_msg, bot_msg) in enumerate(exchanges, 1):
        lines.append(f"## Turn {i}\n\n**User**: {user_msg}\n\n**Assistant**: {bot_msg}\n")
    return "\n".join(lines)


async def setup(bot: commands.Bot) -> None:
    config = bot.config  # type: ignore[attr-defined]
    provider = bot.provider  # type: ignore[attr-defined]
    access = bot.access  # type: ignore[attr-defined]
    messages = bot.messages  # type: ignore[attr-defined]
    await bot.add_cog(ChatCog(bot, config, provider, access, messages))

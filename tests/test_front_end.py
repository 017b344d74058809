"""Tests for access, messages, message_splitter and export rendering."""

from chat_bridge.access import AccessPolicy
from chat_bridge.cog_chat import render_history
from chat_bridge.message_splitter import DISCORD_MAX, split_message
from chat_bridge.messages import ENGLISH, RUSSIAN, get_messages


class TestAccessPolicy:
    def test_allowed_user(self) -> None:
        policy = AccessPolicy(allowed_users=[1, 2])
        assert policy.is_allowed(1) is True
        assert policy.is_allowed(3) is False
        assert policy.is_admin(1) is False

    def test_admin_is_allowed(self) -> None:
        policy = AccessPolicy(allowed_users=[1], admin_users=[9])
        assert policy.is_allowed(9) is True
        assert policy.is_admin(9) is True

    def test_empty_policy_denies(self) -> None:
        assert AccessPolicy().is_allowed(1) is False


class TestMessages:
    def test_language_lookup(self) -> None:
        assert get_messages("ru") is RUSSIAN
        assert get_messages("en-US") is ENGLISH
        assert get_messages("us") is ENGLISH
        assert get_messages("ru_RU") is RUSSIAN

    def test_unknown_language_falls_back(self) -> None:
        assert get_messages("xx") is ENGLISH

    def test_stats_formatting(self) -> None:
        text = ENGLISH.format_stats("$", last=0.1234, today=1.0, month=2.5, total=10)
        assert "Last message: $0.12" in text
        assert "This month  : $2.50" in text
        assert "All-time    : $10.00" in text

    def test_templates_fill(self) -> None:
        for catalog in (ENGLISH, RUSSIAN):
            assert "42" in catalog.not_allowed.format(user_id=42, contact="@admin")
            assert "boom" in catalog.unexpected_error.format(contact="@admin", error="boom")
            assert "Bot" in catalog.greeting.format(name="Bot")


class TestSplitMessage:
    def test_short_message_single_chunk(self) -> None:
        assert split_message("hello") == ["hello"]
        assert split_message("") == [""]

    def test_exact_limit_single_chunk(self) -> None:
        msg = "x" * DISCORD_MAX
        assert split_message(msg) == [msg]

    def test_long_message_preserves_text(self) -> None:
        msg = "a" * (DISCORD_MAX * 2 + 10)
        chunks = split_message(msg)
        assert len(chunks) == 3
        assert "".join(chunks) == msg
        assert all(len(c) <= DISCORD_MAX for c in chunks)

    def test_prefers_newline(self) -> None:
        msg = "x" * 1800 + "\n" + "y" * 500
        chunks = split_message(msg)
        assert chunks[0] == "x" * 1800 + "\n"
        assert chunks[1] == "y" * 500

    def test_code_fence_reopened(self) -> None:
        msg = "```python\n" + "print(1)\n" * 400 + "```"
        chunks = split_message(msg)
        assert len(chunks) >= 2
        for chunk in chunks:
            assert chunk.count("```") % 2 == 0
            assert len(chunk) <= DISCORD_MAX
        assert chunks[1].startswith("```python\n")


class TestRenderHistory:
    def test_turns_numbered(self) -> None:
        text = render_history("Be brief", [("hi", "hello"), ("bye", "ciao")])
        assert "**System**: Be brief" in text
        assert "## Turn 1" in text
        assert "## Turn 2" in text
        assert text.index("hi") < text.index("bye")

    def test_without_prompt(self) -> None:
        assert "**System**" not in render_history("", [("hi", "hello")])

"""Configuration loaded from environment variables."""

from __future__ import annotations

from dataclasses import dataclass, field
from os import environ
from pathlib import Path

from dotenv import load_dotenv

from .cost import PRICES, CostPer1k, load_price_table
from .llm_client import OpenAIChatClient, RequestParams


def _int_list(name: str) -> list[int]:
    raw = environ.get(name, "")
    try:
        return [int(v.strip()) for v in raw.split(",") if v.strip()]
    except ValueError:
        raise ValueError(f"{name} must be a comma-separated list of integers") from None


def _number(name: str, default: float, cast: type = float) -> float:
    raw = environ.get(name, "").strip()
    if not raw:
        return default
    try:
        return cast(raw)
    except ValueError:
        raise ValueError(f"{name} must be a number, got {raw!r}") from None


@dataclass(frozen=True)
class Config:
    discord_token: str
    openai_api_key: str
    openai_base_url: str = OpenAIChatClient.DEFAULT_BASE_URL
    bot_name: str = "ChatBridge"
    model: str = "gpt-4"
    allowed_users: list[int] = field(default_factory=list)
    admin_users: list[int] = field(default_factory=list)
    language: str = "en"
    admin_contact: str = "the administrator"
    currency: str = "$"
    rate: float = 1.0
    cache_ttl_secs: float = 3600.0
    cleanup_interval_secs: float = 1800.0
    db_dir: Path = Path(".db")
    request_params: RequestParams = field(default_factory=RequestParams)
    request_timeout_secs: float = OpenAIChatClient.DEFAULT_TIMEOUT_SECS
    prices: dict[str, CostPer1k] = field(default_factory=lambda: dict(PRICES))

    @classmethod
    def from_env(cls, env_path: Path | None = None) -> Config:
        load_dotenv(env_path)

        token = environ.get("DISCORD_TOKEN")
        if not token:
            raise ValueError("DISCORD_TOKEN is required")

        api_key = environ.get("OPENAI_API_KEY")
        if not api_key:
            raise ValueError("OPENAI_API_KEY is required")

        ttl = _number("CACHE_TTL_SEC", 3600.0)
        if ttl <= 0:
            raise ValueError("CACHE_TTL_SEC must be positive")
        cleanup_interval = _number("CLEANUP_INTERVAL_SEC", ttl / 2)
        if cleanup_interval <= 0:
            raise ValueError("CLEANUP_INTERVAL_SEC must be positive")

        prices = dict(PRICES)
        price_table = environ.get("PRICE_TABLE")
        if price_table:
            path = Path(price_table).expanduser()
            if not path.is_file():
                raise ValueError(f"PRICE_TABLE does not exist: {path}")
            prices = load_price_table(path)

        db_dir = Path(environ.get("DB_DIR", ".db")).expanduser()
        db_dir.mkdir(parents=True, exist_ok=True)

        params = RequestParams(
            max_tokens=int(_number("MAX_TOKENS", 0, int)),
            temperature=_number("TEMPERATURE", 0.0),
            top_p=_number("TOP_P", 0.0),
            presence_penalty=_number("PRESENCE_PENALTY", 0.0),
            frequency_penalty=_number("FREQUENCY_PENALTY", 0.0),
        )

        return cls(
            discord_token=token,
            openai_api_key=api_key,
            openai_base_url=environ.get("OPENAI_BASE_URL", OpenAIChatClient.DEFAULT_BASE_URL),
            bot_name=environ.get("BOT_NAME", "ChatBridge"),
            model=environ.get("MODEL", "gpt-4"),
            allowed_users=_int_list("ALLOWED_USERS"),
            admin_users=_int_list("ADMIN_USERS"),
            language=environ.get("LANGUAGE", "en"),
            admin_contact=environ.get("ADMIN_CONTACT", "the administrator"),
            currency=environ.get("CURRENCY", "$"),
            rate=_number("RATE", 1.0),
            cache_ttl_secs=ttl,
            cleanup_interval_secs=cleanup_interval,
            db_dir=db_dir,
            request_params=params,
            request_timeout_secs=_number(
                "REQUEST_TIMEOUT_SEC", OpenAIChatClient.DEFAULT_TIMEOUT_SECS
            ),
            prices=prices,
        )

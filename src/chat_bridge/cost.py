"""Token usage → money conversion using a per-model price table."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from pathlib import Path

import yaml

from .errors import CostLookupError

log = logging.getLogger(__name__)


@dataclass(frozen=True)
class Usage:
    input_tokens: int = 0
    output_tokens: int = 0


@dataclass(frozen=True)
class CostPer1k:
    """Price of 1,000 input and 1,000 output tokens."""

    input: float
    output: float


PRICES: dict[str, CostPer1k] = {
    "gpt-3.5-turbo": CostPer1k(input=0.0015, output=0.002),
    "gpt-3.5-turbo-16k": CostPer1k(input=0.003, output=0.004),
    "gpt-3.5-turbo-1106": CostPer1k(input=0.001, output=0.002),
    "gpt-4": CostPer1k(input=0.03, output=0.06),
    "gpt-4-32k": CostPer1k(input=0.06, output=0.12),
    "gpt-4-1106-preview": CostPer1k(input=0.01, output=0.03),
}


def calculate_cost(usage: Usage, price: CostPer1k) -> float:
    input_cost = usage.input_tokens / 1000 * price.input
    output_cost = usage.output_tokens / 1000 * price.output
    return input_cost + output_cost


def calculate_cost_by_model(
    usage: Usage, model: str, prices: dict[str, CostPer1k] | None = None
) -> float:
    table = PRICES if prices is None else prices
    price = table.get(model)
    if price is None:
        raise CostLookupError(f"price not found for model '{model}'")
    return calculate_cost(usage, price)


def load_price_table(path: Path) -> dict[str, CostPer1k]:
    """Return the built-in table overlaid with entries from a YAML file.

    The file maps model names to ``{input: <per 1k>, output: <per 1k>}``.
    """
    raw = yaml.safe_load(path.read_text(encoding="utf-8")) or {}
    if not isinstance(raw, dict):
        raise ValueError(f"price table must be a mapping: {path}")

    table = dict(PRICES)
    for model, entry in raw.items():
        if not isinstance(entry, dict) or "input" not in entry or "output" not in entry:
            raise ValueError(f"price entry for '{model}' needs input and output")
        price = CostPer1k(input=float(entry["input"]), output=float(entry["output"]))
        if price.input < 0 or price.output < 0:
            raise ValueError(f"price entry for '{model}' must not be negative")
        table[str(model)] = price

    log.info("Loaded %d price entries from %s", len(raw), path)
    return table

"""Break model replies into Discord-sized chunks without breaking code fences."""

DISCORD_MAX = 2000
FENCE = "```"
# room for closing a fence at the end of a chunk and reopening it in the next
_FENCE_RESERVE = 40


def split_message(text: str, limit: int = DISCORD_MAX) -> list[str]:
    if len(text) <= limit:
        return [text]

    budget = limit - _FENCE_RESERVE
    chunks: list[str] = []
    remaining = text
    while len(remaining) > limit:
        cut = _cut_point(remaining, budget)
        chunk, remaining = remaining[:cut], remaining[cut:]
        open_lang = _open_fence_language(chunk)
        if open_lang is not None:
            chunk = chunk.rstrip("\n") + "\n" + FENCE
            remaining = f"{FENCE}{open_lang}\n{remaining}"
        chunks.append(chunk)
    if remaining:
        chunks.append(remaining)
    return chunks


def _cut_point(text: str, budget: int) -> int:
    """Prefer the last newline in the final 200 chars of the budget."""
    newline = text.rfind("\n", max(0, budget - 200), budget)
    return newline + 1 if newline > 0 else budget


def _open_fence_language(chunk: str) -> str | None:
    """Language tag of a fence left open in ``chunk``, "" if untagged, None if balanced."""
    if chunk.count(FENCE) % 2 == 0:
        return None
    tail = chunk[chunk.rfind(FENCE) + len(FENCE):]
    return tail.split("\n", 1)[0].strip()

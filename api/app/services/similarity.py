from __future__ import annotations

from typing import Iterable, Mapping

NEUTRAL = 0.5


def _normalize(value: object) -> str:
    return str(value or "").strip().lower()


def set_overlap(a: Iterable[str], b: Iterable[str]) -> float:
    """Jaccard similarity over case-insensitive string sets.

    Two empty sets are treated as identical (1.0); exactly one empty set has
    nothing in common with the other (0.0).
    """
    left = {_normalize(x) for x in a if _normalize(x)}
    right = {_normalize(x) for x in b if _normalize(x)}
    if not left and not right:
        return 1.0
    if not left or not right:
        return 0.0
    return len(left & right) / len(left | right)


def numeric_similarity(x: float, y: float, maximum: float = 10.0) -> float:
    return max(0.0, 1.0 - abs(float(x) - float(y)) / maximum)


def ordinal_similarity(a: str, b: str, scale: tuple[str, ...], default: str) -> float:
    """Adjacency score on an ordered scale: each step apart costs 1/len(scale)."""
    ia = scale.index(a) if a in scale else scale.index(default)
    ib = scale.index(b) if b in scale else scale.index(default)
    return max(0.0, 1.0 - abs(ia - ib) / len(scale))


def table_lookup(table: Mapping[str, Mapping[str, float]], a: str, b: str, default: float = NEUTRAL) -> float:
    """Mean of table[a][b] and table[b][a]."""
    forward = table.get(a, {}).get(b, default)
    backward = table.get(b, {}).get(a, default)
    return (forward + backward) / 2.0


def shared_items(a: Iterable[str], b: Iterable[str]) -> list[str]:
    other = {_normalize(x) for x in b}
    out: list[str] = []
    seen: set[str] = set()
    for item in a:
        key = _normalize(item)
        if key and key in other and key not in seen:
            seen.add(key)
            out.append(item)
    return out


def mean(values: list[float]) -> float:
    if not values:
        return NEUTRAL
    return sum(values) / len(values)

from __future__ import annotations

import re
from typing import Iterable, List

__all__ = [
    "clip",
    "squash_ws",
    "unique_preserve",
]

_WS_RE = re.compile(r"\s+")

def clip(x: object, lo: float = 0.0, hi: float = 1.0) -> float:
    try:
        f = float(x)  # type: ignore[arg-type]
    except (TypeError, ValueError):
        return lo
    return max(lo, min(hi, f))

def squash_ws(s: str) -> str:
    """Collapse whitespace to single spaces; trim ends."""
    return _WS_RE.sub(" ", (s or "")).strip()

def unique_preserve(items: Iterable[str]) -> List[str]:
    seen = set()
    out: List[str] = []
    for it in items:
        if it not in seen:
            seen.add(it)
            out.append(it)
    return out

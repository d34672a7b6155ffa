from __future__ import annotations

from types import MappingProxyType
from typing import Iterable, Mapping

from muxpick.authorities import SessionRecord


def designate(rank: int) -> str:
    """Map a zero-based rank to its shortcut label: a..z, then aa, ab, ..."""
    if rank < 26:
        return chr(ord("a") + rank)
    first = chr(ord("a") + rank // 26 - 1)
    second = chr(ord("a") + rank % 26)
    return first + second


def build_letter_map(records: Iterable[SessionRecord]) -> Mapping[str, str]:
    """Label every record in listing order. The returned mapping is read-only."""
    return MappingProxyType({designate(i): r.name for i, r in enumerate(records)})

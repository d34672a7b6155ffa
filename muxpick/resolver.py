"""Turn one line of user input into the action to take.

With no sessions listed, input names a new session (empty means a fresh
UUID). With sessions listed, a single letter attaches to the session with
that label, ``reset`` kills every listed session, empty creates a session
named by a fresh UUID and anything longer creates a session by that name.
``reset`` is reserved, so a session literally called "reset" cannot be
created from the prompt.
"""

from __future__ import annotations

import re
import uuid
from dataclasses import dataclass
from typing import Callable, Mapping, Union

from muxpick.authorities import SessionRecord

RESET_KEYWORD = "reset"

_SINGLE_LETTER = re.compile(r"[a-z]", re.IGNORECASE)


class ValidationRejected(ValueError):
    def __init__(self, reason: str) -> None:
        super().__init__(reason)
        self.reason = reason


@dataclass(frozen=True)
class Attach:
    name: str


@dataclass(frozen=True)
class Create:
    name: str


@dataclass(frozen=True)
class KillAll:
    sessions: tuple[SessionRecord, ...]


@dataclass(frozen=True)
class Cancel:
    pass


ResolvedAction = Union[Attach, Create, KillAll, Cancel]


def new_session_name() -> str:
    return str(uuid.uuid4())


def validate(raw: str, letter_map: Mapping[str, str]) -> str | None:
    """Return why raw is not acceptable, or None when it is."""
    value = raw.strip()
    if not letter_map:
        if _SINGLE_LETTER.fullmatch(value):
            return "Session name must be empty (for UUID) or 2+ characters"
        return None
    lowered = value.lower()
    if len(lowered) == 1 and lowered not in letter_map:
        return f"Invalid session letter. Choose from: {', '.join(letter_map)}"
    return None


def resolve(
    raw: str | None,
    sessions: list[SessionRecord],
    letter_map: Mapping[str, str],
    new_name: Callable[[], str] = new_session_name,
) -> ResolvedAction:
    """Decide what to do with one line of input. None means the prompt was cancelled."""
    if raw is None:
        return Cancel()

    reason = validate(raw, letter_map)
    if reason is not None:
        raise ValidationRejected(reason)

    value = raw.strip()
    lowered = value.lower()

    if not sessions:
        return Create(value or new_name())

    if lowered == RESET_KEYWORD:
        return KillAll(tuple(sessions))
    if not value:
        return Create(new_name())
    if len(lowered) == 1:
        return Attach(letter_map[lowered])
    return Create(value)

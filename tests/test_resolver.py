"""Unit tests for resolving user input into an action."""

import pytest

from muxpick.authorities import SessionRecord
from muxpick.letters import build_letter_map
from muxpick.resolver import (
    Attach,
    Cancel,
    Create,
    KillAll,
    ValidationRejected,
    resolve,
    validate,
)


@pytest.fixture
def sessions():
    return [SessionRecord(name="alpha"), SessionRecord(name="beta")]


@pytest.fixture
def letter_map(sessions):
    return build_letter_map(sessions)


class TestWithSessions:
    """Resolve against a listing of alpha and beta."""

    def test_letter_attaches(self, sessions, letter_map):
        assert resolve("a", sessions, letter_map) == Attach("alpha")
        assert resolve("b", sessions, letter_map) == Attach("beta")

    def test_letter_is_case_insensitive_and_trimmed(self, sessions, letter_map):
        assert resolve("  B ", sessions, letter_map) == Attach("beta")

    def test_unknown_letter_rejected(self, sessions, letter_map):
        with pytest.raises(ValidationRejected) as exc_info:
            resolve("c", sessions, letter_map)
        assert exc_info.value.reason == "Invalid session letter. Choose from: a, b"

    def test_single_non_letter_rejected(self, sessions, letter_map):
        with pytest.raises(ValidationRejected):
            resolve("7", sessions, letter_map)

    def test_empty_creates_uuid(self, sessions, letter_map):
        action = resolve("", sessions, letter_map, new_name=lambda: "generated")
        assert action == Create("generated")

    def test_empty_names_are_fresh(self, sessions, letter_map):
        first = resolve("   ", sessions, letter_map)
        second = resolve("   ", sessions, letter_map)
        assert isinstance(first, Create) and isinstance(second, Create)
        assert first.name != second.name
        assert len(first.name) == 36

    def test_reset_kills_all(self, sessions, letter_map):
        assert resolve("reset", sessions, letter_map) == KillAll(tuple(sessions))
        assert resolve(" ReSeT ", sessions, letter_map) == KillAll(tuple(sessions))

    def test_name_creates_with_original_case(self, sessions, letter_map):
        assert resolve("my-proj", sessions, letter_map) == Create("my-proj")
        assert resolve("  My-Proj  ", sessions, letter_map) == Create("My-Proj")

    def test_existing_full_name_creates(self, sessions, letter_map):
        """Full names go to the create slot; the authority attaches or refuses."""
        assert resolve("alpha", sessions, letter_map) == Create("alpha")

    def test_cancel(self, sessions, letter_map):
        assert resolve(None, sessions, letter_map) == Cancel()

    def test_deterministic(self, sessions, letter_map):
        assert resolve("a", sessions, letter_map) == resolve("a", sessions, letter_map)


class TestWithoutSessions:
    """Resolve against an empty listing."""

    def test_single_letter_rejected(self):
        with pytest.raises(ValidationRejected) as exc_info:
            resolve("x", [], {})
        assert exc_info.value.reason == "Session name must be empty (for UUID) or 2+ characters"

    def test_two_letters_create(self):
        assert resolve("ab", [], {}) == Create("ab")

    def test_empty_creates_uuid(self):
        action = resolve("", [], {})
        assert isinstance(action, Create)
        assert len(action.name) == 36

    def test_single_digit_is_a_name(self):
        assert resolve("1", [], {}) == Create("1")

    def test_reset_is_a_name(self):
        assert resolve("reset", [], {}) == Create("reset")

    def test_cancel(self):
        assert resolve(None, [], {}) == Cancel()


class TestValidate:
    """Test validate() as used by the prompt."""

    def test_accepts(self, letter_map):
        assert validate("a", letter_map) is None
        assert validate("", letter_map) is None
        assert validate("new-session", letter_map) is None

    def test_rejects(self, letter_map):
        assert validate("z", letter_map) == "Invalid session letter. Choose from: a, b"
        assert validate(" x ", {}) == "Session name must be empty (for UUID) or 2+ characters"

from __future__ import annotations

from typing import Callable, Optional, TextIO

from rich.console import Console
from rich.prompt import InvalidResponse, Prompt


class LinePrompt(Prompt):
    """Free-form line prompt that re-asks until the validator accepts the value."""

    prompt_suffix = " "

    def __init__(self, prompt: str, validate: Callable[[str], Optional[str]], console: Console | None = None) -> None:
        super().__init__(prompt, console=console, show_default=False, show_choices=False)
        self.validate = validate

    def process_response(self, value: str) -> str:
        value = value.rstrip("\r\n")
        reason = self.validate(value)
        if reason is not None:
            raise InvalidResponse(f"[prompt.invalid]{reason}")
        return value


def ask_line(
    message: str,
    placeholder: str,
    validate: Callable[[str], Optional[str]],
    console: Console | None = None,
    stream: TextIO | None = None,
) -> str | None:
    """Read one line. Returns None if the user aborted (Ctrl-C / Ctrl-D), never for empty input."""
    prompt = LinePrompt(f"{message} [dim]({placeholder})[/dim]", validate, console=console)
    try:
        return prompt(stream=stream)
    except (KeyboardInterrupt, EOFError):
        return None

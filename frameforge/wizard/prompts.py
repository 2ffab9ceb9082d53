"""Interactive prompt primitives for the wizard.

Every prompt goes through a :class:`LineReader` (``ask(prompt) -> answer``),
the controller's only input dependency.  Free-text prompts re-ask until the
answer validates; numbered menus fall back to their documented default
through :func:`resolve_or_default`.
"""

from __future__ import annotations

import re
from collections.abc import Callable, Sequence
from pathlib import Path
from typing import Protocol, TypeVar

from rich.console import Console

from frameforge.model.models import (
    is_absolute_url,
    is_valid_environment_name,
    is_valid_project_name,
)
from frameforge.model.presets import resolve_or_default
from frameforge.utils import console, print_error, print_warning

T = TypeVar("T")


class InputValidationError(Exception):
    """An answer was rejected; the current step asks again."""


# ---------------------------------------------------------------------------
# Line readers
# ---------------------------------------------------------------------------


class LineReader(Protocol):
    def ask(self, prompt: str) -> str: ...


class RichLineReader:
    """Reads answers from the terminal through the shared Rich console."""

    def __init__(self, output: Console | None = None) -> None:
        self.console = output or console

    def ask(self, prompt: str) -> str:
        return self.console.input(f"[bold cyan]?[/bold cyan] {prompt} ")


# ---------------------------------------------------------------------------
# Validators
# ---------------------------------------------------------------------------

Validator = Callable[[str], None]

_ENV_VAR_RE = re.compile(r"^[A-Z_][A-Z0-9_]*$")
_HEADER_RE = re.compile(r"^[A-Za-z0-9-]+$")


def validate_project_name(value: str) -> None:
    if not is_valid_project_name(value):
        raise InputValidationError(
            "Project name can only contain letters, numbers, hyphens, and underscores."
        )


def validate_url(value: str) -> None:
    if not is_absolute_url(value):
        raise InputValidationError(f"'{value}' is not an absolute URL (e.g. https://example.com).")


def validate_optional_file(value: str) -> None:
    """Accept an empty answer or a path that exists on disk."""
    if value and not Path(value).expanduser().exists():
        raise InputValidationError(f"File not found: {value}")


def validate_environment_name(value: str) -> None:
    if not is_valid_environment_name(value):
        raise InputValidationError(
            "Environment names must start with a lowercase letter and use only a-z, 0-9, '-' or '_'."
        )


def validate_env_var(value: str) -> None:
    if not _ENV_VAR_RE.match(value):
        raise InputValidationError(f"'{value}' is not a valid environment variable name.")


def validate_header_name(value: str) -> None:
    if not _HEADER_RE.match(value):
        raise InputValidationError(f"'{value}' is not a valid HTTP header name.")


def validate_url_path(value: str) -> None:
    if not value.startswith("/") or " " in value:
        raise InputValidationError("Path must start with '/' and contain no spaces.")


# ---------------------------------------------------------------------------
# Prompts
# ---------------------------------------------------------------------------


def ask_text(
    reader: LineReader,
    prompt: str,
    default: str | None = None,
    validator: Validator | None = None,
) -> str:
    """Ask for free text until the answer validates.

    An empty answer selects *default* (which is validated too).  With no
    default an empty answer is rejected.
    """
    label = f"{prompt} ({default}):" if default else f"{prompt}:"
    while True:
        answer = reader.ask(label).strip()
        if not answer:
            if default is None:
                print_error("A value is required.")
                continue
            answer = default
        try:
            if validator is not None:
                validator(answer)
        except InputValidationError as exc:
            print_error(str(exc))
            continue
        return answer


def ask_yes_no(reader: LineReader, prompt: str, default: bool = False) -> bool:
    """Ask a yes/no question; re-asks on anything but y/yes/n/no or empty."""
    hint = "Y/n" if default else "y/N"
    while True:
        answer = reader.ask(f"{prompt} ({hint}):").strip().lower()
        if not answer:
            return default
        if answer in ("y", "yes"):
            return True
        if answer in ("n", "no"):
            return False
        print_error("Please answer 'y' or 'n'.")


def ask_menu(
    reader: LineReader,
    prompt: str,
    options: Sequence[tuple[T, str]],
    default: T,
) -> T:
    """Show a numbered menu and return the chosen value.

    Empty input selects *default* silently; an out-of-range or unparsable
    answer selects *default* with a warning.
    """
    console.print(f"\n[bold]{prompt}[/bold]")
    default_index = 1
    for index, (value, label) in enumerate(options, start=1):
        marker = " [dim](default)[/dim]" if value == default else ""
        if value == default:
            default_index = index
        console.print(f"  {index}. {label}{marker}")

    table = {str(index): value for index, (value, _label) in enumerate(options, start=1)}
    answer = reader.ask(f"Enter your choice (1-{len(options)}) [{default_index}]:")
    return resolve_or_default(answer, table, default, label="choice")


def ask_multi_select(
    reader: LineReader,
    prompt: str,
    options: Sequence[tuple[str, str, bool]],
) -> list[str]:
    """Numbered multi-select over ``(value, label, enabled_by_default)`` options.

    The answer is a comma/space separated list of indices.  Empty input keeps
    the defaults; any invalid index discards the whole answer, warns, and
    keeps the defaults.  Selected values are returned in option order.
    """
    console.print(f"\n[bold]{prompt}[/bold]")
    for index, (_value, label, enabled) in enumerate(options, start=1):
        marker = "[green]x[/green]" if enabled else " "
        console.print(f"  [{marker}] {index}. {label}")

    defaults = [value for value, _label, enabled in options if enabled]
    answer = reader.ask("Enter numbers separated by commas (Enter keeps defaults):").strip()
    if not answer:
        return defaults

    chosen: set[int] = set()
    for token in re.split(r"[,\s]+", answer):
        if not token:
            continue
        if not token.isdigit() or not 1 <= int(token) <= len(options):
            print_warning(f"Invalid selection {answer!r}, using defaults.")
            return defaults
        chosen.add(int(token))

    if not chosen:
        return defaults
    return [value for index, (value, _l, _e) in enumerate(options, start=1) if index in chosen]

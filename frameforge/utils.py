"""Console output and subprocess helpers shared by the wizard and tooling.

All user-facing text goes through the single :data:`console`, so tests can
patch ``frameforge.utils.console`` to capture or silence it.
"""

from __future__ import annotations

import asyncio
import os
from collections.abc import Sequence
from pathlib import Path

from rich import box
from rich.console import Console
from rich.markup import escape
from rich.rule import Rule
from rich.table import Table

console = Console()

# ---------------------------------------------------------------------------
# Subprocesses
# ---------------------------------------------------------------------------


async def run_command(
    args: Sequence[str],
    cwd: str | Path | None = None,
    timeout: int = 300,
    env: dict[str, str] | None = None,
) -> tuple[int, str, str]:
    """Run an executable with *args* and wait for it to exit.

    The command is executed directly (no shell).  Output is decoded as UTF-8
    with replacement characters for anything undecodable.

    Args:
        args: Executable followed by its arguments.
        cwd: Working directory, usually the generated project root.
        timeout: Seconds to wait before the process is killed.
        env: Variables layered over the current environment.

    Returns:
        ``(returncode, stdout, stderr)``.  A timed-out process yields
        returncode ``-1`` and a message in *stderr*.

    Raises:
        FileNotFoundError: If the executable cannot be found.
    """
    process = await asyncio.create_subprocess_exec(
        *args,
        stdout=asyncio.subprocess.PIPE,
        stderr=asyncio.subprocess.PIPE,
        cwd=str(cwd) if cwd is not None else None,
        env={**os.environ, **env} if env else None,
    )

    try:
        out, err = await asyncio.wait_for(process.communicate(), timeout=timeout)
    except asyncio.TimeoutError:
        process.kill()
        await process.wait()
        return -1, "", f"'{' '.join(args)}' did not finish within {timeout}s"

    return (
        process.returncode or 0,
        out.decode("utf-8", errors="replace").strip(),
        err.decode("utf-8", errors="replace").strip(),
    )


def format_duration(seconds: float) -> str:
    """Render elapsed wall time, e.g. ``"4.2s"`` or ``"2m 07s"``."""
    seconds = max(seconds, 0.0)
    if seconds < 60:
        return f"{seconds:.1f}s"
    minutes, rest = divmod(int(seconds), 60)
    return f"{minutes}m {rest:02d}s"


# ---------------------------------------------------------------------------
# Console output
# ---------------------------------------------------------------------------


def print_step_header(step: int, name: str) -> None:
    """Announce wizard step *step* with a full-width rule."""
    console.line()
    console.print(Rule(f"[bold bright_cyan]Step {step} · {escape(name)}[/bold bright_cyan]", style="cyan"))


def print_summary_table(data: dict[str, str], title: str = "Summary") -> None:
    """Print *data* as a two-column table, one row per key."""
    table = Table(title=title, box=box.ROUNDED, header_style="bold cyan")
    table.add_column("Setting", style="dim", no_wrap=True)
    table.add_column("Value", overflow="fold")
    for key, value in data.items():
        table.add_row(key, escape(str(value)))
    console.print(table)


def print_success(message: str) -> None:
    console.print(f"[bold green]✔ {escape(message)}[/bold green]")


def print_error(message: str) -> None:
    console.print(f"[bold red]✖ {escape(message)}[/bold red]")


def print_warning(message: str) -> None:
    console.print(f"[bold yellow]! {escape(message)}[/bold yellow]")


def print_info(message: str) -> None:
    console.print(f"[dim]{escape(message)}[/dim]")

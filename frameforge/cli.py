"""frameforge command-line entry point.

Usage::

    frameforge
    python -m frameforge.cli

Everything is collected interactively; the only flag is ``--help``.
Exit codes: 0 on success, menu exit or user abort; 1 when generation
reported errors or an unexpected failure occurred.
"""

from __future__ import annotations

import argparse
import asyncio
import sys

from rich.panel import Panel

from frameforge.config import GeneratorSettings
from frameforge.scaffolder.materializer import FileSystem
from frameforge.scaffolder.tooling import CommandRunner
from frameforge.utils import console, print_error, print_info, print_warning, run_command
from frameforge.wizard.controller import WizardController
from frameforge.wizard.prompts import LineReader, RichLineReader

DOCUMENTATION_LINKS: list[tuple[str, str]] = [
    ("Playwright", "https://playwright.dev/docs/intro"),
    ("Playwright API testing", "https://playwright.dev/docs/api-testing"),
    ("WebdriverIO", "https://webdriver.io/docs/gettingstarted"),
    ("Appium", "https://appium.io/docs/en/latest/"),
    ("axe-core", "https://github.com/dequelabs/axe-core"),
]

MAIN_MENU: list[tuple[str, str]] = [
    ("1", "Create a new test automation project"),
    ("2", "Show documentation links"),
    ("3", "Exit"),
]


def _print_banner() -> None:
    console.print(
        Panel(
            "[bold]frameforge[/bold]\n"
            "Generate Playwright / WebdriverIO test automation projects",
            border_style="bright_cyan",
        )
    )


def _print_documentation() -> None:
    console.print("\n[bold]Documentation[/bold]")
    for name, url in DOCUMENTATION_LINKS:
        console.print(f"  {name}: [link={url}]{url}[/link]")


async def run_session(
    reader: LineReader,
    settings: GeneratorSettings,
    fs: FileSystem | None = None,
    tool_runner: CommandRunner = run_command,
) -> int:
    """Show the main menu until the user creates a project or exits.

    Returns:
        The process exit code.
    """
    _print_banner()
    while True:
        console.print("\n[bold]What would you like to do?[/bold]")
        for key, label in MAIN_MENU:
            console.print(f"  {key}. {label}")
        choice = reader.ask("Enter your choice (1-3):").strip()

        if choice == "1":
            controller = WizardController(reader, settings, fs=fs, tool_runner=tool_runner)
            outcome = await controller.run()
            return outcome.exit_code
        if choice == "2":
            _print_documentation()
            continue
        if choice == "3":
            print_info("Goodbye!")
            return 0
        print_warning("Invalid choice. Please enter 1, 2 or 3.")


def main(argv: list[str] | None = None) -> None:
    """CLI entry point for ``frameforge`` and ``python -m frameforge.cli``."""
    parser = argparse.ArgumentParser(
        prog="frameforge",
        description="Interactive generator for Playwright / WebdriverIO test automation projects.",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog=(
            "All options are collected interactively.\n"
            "Prompt defaults can be seeded with FRAMEFORGE_* environment variables:\n"
            "  FRAMEFORGE_PROJECT_NAME, FRAMEFORGE_TARGET_PATH, FRAMEFORGE_BASE_URL,\n"
            "  FRAMEFORGE_API_URL, FRAMEFORGE_ENVIRONMENTS, FRAMEFORGE_RUN_TOOLING,\n"
            "  FRAMEFORGE_CLEAN_ON_OVERWRITE, FRAMEFORGE_TOOLING_TIMEOUT,\n"
            "  FRAMEFORGE_NPM, FRAMEFORGE_NPX, FRAMEFORGE_GIT\n"
        ),
    )
    parser.parse_args(argv)

    try:
        settings = GeneratorSettings.from_env()
        exit_code = asyncio.run(run_session(RichLineReader(), settings))
    except (KeyboardInterrupt, EOFError):
        console.print()
        print_warning("Cancelled by user.")
        exit_code = 0
    except Exception as exc:
        print_error(f"Error: {exc}")
        exit_code = 1

    sys.exit(exit_code)


if __name__ == "__main__":
    main()

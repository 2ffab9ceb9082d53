"""Post-generation tooling for a freshly generated project.

Runs dependency installation, browser/driver installation and ``git init``
inside the generated project root.  Every step is best-effort: failures are
collected as :class:`PostGenerationToolingFailure` warnings and never abort
or fail the overall run.
"""

from __future__ import annotations

from collections.abc import Awaitable, Callable
from dataclasses import dataclass, field
from pathlib import Path

from frameforge.config import ToolingConfig
from frameforge.model.models import MobileEngine, MobilePlatform, ProjectConfig
from frameforge.utils import print_info, print_success, print_warning, run_command

CommandRunner = Callable[..., Awaitable[tuple[int, str, str]]]

_APPIUM_DRIVERS: dict[MobileEngine, str] = {
    MobileEngine.UIAUTOMATOR2: "uiautomator2",
    MobileEngine.ESPRESSO: "espresso",
    MobileEngine.XCUITEST: "xcuitest",
}


class PostGenerationToolingFailure(Exception):
    """A post-generation command failed or could not be started."""

    def __init__(self, step: str, command: list[str], detail: str, returncode: int | None = None):
        self.step = step
        self.command = command
        self.detail = detail
        self.returncode = returncode
        super().__init__(f"{step} failed ({' '.join(command)}): {detail}")


@dataclass(frozen=True)
class ToolingStep:
    """One command to run in the generated project root."""

    name: str
    command: list[str]


@dataclass
class ToolingReport:
    """Outcome of the post-generation tooling pass."""

    completed: list[str] = field(default_factory=list)
    warnings: list[PostGenerationToolingFailure] = field(default_factory=list)

    @property
    def clean(self) -> bool:
        return not self.warnings


def plan_tooling(config: ProjectConfig, tooling: ToolingConfig) -> list[ToolingStep]:
    """Return the ordered tooling steps that apply to *config*."""
    steps = [ToolingStep("Install dependencies", [tooling.npm, "install"])]

    needs_browsers = config.has_browser or (
        config.mobile is not None
        and config.mobile.target_for(MobilePlatform.MOBILE_WEB) is not None
    )
    if needs_browsers:
        steps.append(ToolingStep("Install Playwright browsers", [tooling.npx, "playwright", "install"]))

    if config.mobile is not None:
        for engine in config.mobile.engines:
            driver = _APPIUM_DRIVERS.get(engine)
            if driver:
                steps.append(
                    ToolingStep(
                        f"Install Appium {driver} driver",
                        [tooling.npx, "appium", "driver", "install", driver],
                    )
                )

    steps.append(ToolingStep("Initialize git repository", [tooling.git, "init"]))
    return steps


async def run_tooling(
    config: ProjectConfig,
    tooling: ToolingConfig,
    runner: CommandRunner = run_command,
) -> ToolingReport:
    """Run every applicable tooling step in the generated project root.

    Args:
        config: The frozen project configuration.
        tooling: Executables and timeout to use.
        runner: Coroutine with the signature of :func:`frameforge.utils.run_command`.

    Returns:
        A :class:`ToolingReport`; failures are recorded, never raised.
    """
    report = ToolingReport()
    cwd: Path = config.project_root

    for step in plan_tooling(config, tooling):
        print_info(f"Running: {' '.join(step.command)}")
        try:
            returncode, _stdout, stderr = await runner(
                step.command, cwd=cwd, timeout=tooling.timeout
            )
        except OSError as exc:
            failure = PostGenerationToolingFailure(step.name, step.command, str(exc))
            report.warnings.append(failure)
            print_warning(f"{step.name} skipped: {exc}")
            continue

        if returncode != 0:
            detail = (stderr or "").strip().splitlines()[-1:] or [f"exit code {returncode}"]
            failure = PostGenerationToolingFailure(
                step.name, step.command, detail[0], returncode=returncode
            )
            report.warnings.append(failure)
            print_warning(f"{step.name} failed. Run '{' '.join(step.command)}' manually.")
            continue

        report.completed.append(step.name)
        print_success(f"{step.name} completed")

    return report

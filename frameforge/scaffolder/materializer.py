"""Materialize planned generation tasks on the filesystem.

The :class:`Materializer` executes a task list produced by the planner against
a :class:`FileSystem` with a single session-wide conflict policy.  It is
best-effort: a failing path is recorded as a :class:`MaterializationError` and
the run carries on with the remaining tasks.
"""

from __future__ import annotations

import asyncio
import shutil
from collections.abc import Callable, Iterable
from dataclasses import dataclass, field
from pathlib import Path, PurePosixPath
from typing import Protocol

from jinja2 import TemplateError

from frameforge.model.models import FileConflictPolicy
from frameforge.scaffolder.planner import GenerationTask
from frameforge.utils import console


class MaterializationError(Exception):
    """A single planned path could not be produced or written."""

    def __init__(self, relative_path: str, reason: str):
        self.relative_path = relative_path
        self.reason = reason
        super().__init__(f"{relative_path}: {reason}")


# ---------------------------------------------------------------------------
# Filesystem abstraction
# ---------------------------------------------------------------------------


class FileSystem(Protocol):
    """The only filesystem operations the wizard and materializer rely on."""

    def exists(self, path: Path) -> bool: ...

    def is_dir(self, path: Path) -> bool: ...

    def mkdir(self, path: Path) -> None:
        """Create *path* and its parents; no error if it already exists."""
        ...

    def write_text(self, path: Path, content: str) -> None: ...

    def remove_tree(self, path: Path) -> None: ...


class LocalFileSystem:
    """:class:`FileSystem` backed by the real disk."""

    def exists(self, path: Path) -> bool:
        return path.exists()

    def is_dir(self, path: Path) -> bool:
        return path.is_dir()

    def mkdir(self, path: Path) -> None:
        path.mkdir(parents=True, exist_ok=True)

    def write_text(self, path: Path, content: str) -> None:
        path.write_text(content, encoding="utf-8")

    def remove_tree(self, path: Path) -> None:
        if path.is_dir():
            shutil.rmtree(path)
        elif path.exists():
            path.unlink()


# ---------------------------------------------------------------------------
# Result
# ---------------------------------------------------------------------------


@dataclass
class MaterializationResult:
    """Outcome of one materialization pass."""

    written: list[str] = field(default_factory=list)
    skipped: list[str] = field(default_factory=list)
    errors: list[MaterializationError] = field(default_factory=list)

    @property
    def success(self) -> bool:
        return not self.errors

    def summary(self) -> str:
        """Return a one-line human-readable summary."""
        status = "OK" if self.success else "FAILED"
        return (
            f"{status}: {len(self.written)} written, "
            f"{len(self.skipped)} skipped, {len(self.errors)} errors"
        )


ProgressCallback = Callable[[GenerationTask, str], None]

_STATUS_STYLES = {
    "written": "green",
    "skipped": "yellow",
    "error": "red",
}


def print_progress(task: GenerationTask, status: str) -> None:
    """Default progress reporter: one console line per completed task."""
    style = _STATUS_STYLES.get(status, "white")
    suffix = "/" if task.is_directory else ""
    console.print(f"  [{style}]{status:<8}[/{style}] {task.relative_path}{suffix}")


# ---------------------------------------------------------------------------
# Materializer
# ---------------------------------------------------------------------------


class Materializer:
    """Writes generation tasks under a project root.

    Usage::

        materializer = Materializer(project_root)
        result = await materializer.materialize(tasks, FileConflictPolicy.OVERWRITE)

    Tasks are executed sequentially in plan order.  Each write runs in a
    worker thread through :func:`asyncio.to_thread` so the event loop stays
    responsive.
    """

    def __init__(self, root: str | Path, fs: FileSystem | None = None) -> None:
        self.root = Path(root)
        self.fs: FileSystem = fs if fs is not None else LocalFileSystem()

    def resolve(self, relative_path: str) -> Path:
        """Map a planned relative path to an absolute path under :attr:`root`.

        Raises:
            MaterializationError: If the path is absolute or escapes the root.
        """
        rel = PurePosixPath(relative_path)
        if rel.is_absolute() or ".." in rel.parts or not rel.parts:
            raise MaterializationError(relative_path, "path escapes the project root")
        return self.root.joinpath(*rel.parts)

    async def materialize(
        self,
        tasks: Iterable[GenerationTask],
        policy: FileConflictPolicy,
        on_progress: ProgressCallback | None = print_progress,
    ) -> MaterializationResult:
        """Execute *tasks* under the session-wide conflict *policy*.

        Args:
            tasks: Planned tasks, already de-duplicated by the planner.
            policy: ``overwrite`` replaces existing files; ``abort`` leaves
                any existing path untouched and records it as skipped.
            on_progress: Called with ``(task, status)`` after every task, where
                status is ``"written"``, ``"skipped"`` or ``"error"``.  Pass
                ``None`` to disable progress output.

        Returns:
            The aggregated :class:`MaterializationResult`.  Per-path failures
            are collected in ``errors``; they are never raised.
        """
        result = MaterializationResult()

        for task in tasks:
            try:
                status = await self._execute(task, policy)
            except MaterializationError as exc:
                result.errors.append(exc)
                status = "error"
            except (OSError, TemplateError, ValueError) as exc:
                result.errors.append(
                    MaterializationError(task.relative_path, f"{type(exc).__name__}: {exc}")
                )
                status = "error"

            if status == "written":
                result.written.append(task.relative_path)
            elif status == "skipped":
                result.skipped.append(task.relative_path)

            if on_progress is not None:
                on_progress(task, status)

        return result

    async def _execute(self, task: GenerationTask, policy: FileConflictPolicy) -> str:
        target = self.resolve(task.relative_path)
        exists = await asyncio.to_thread(self.fs.exists, target)

        if task.is_directory:
            if exists:
                return "skipped"
            await asyncio.to_thread(self.fs.mkdir, target)
            return "written"

        if exists and policy is FileConflictPolicy.ABORT:
            return "skipped"

        content = task.produce()
        await asyncio.to_thread(self.fs.mkdir, target.parent)
        await asyncio.to_thread(self.fs.write_text, target, content)
        return "written"

    async def clean(self) -> None:
        """Remove the whole project root (used before a clean overwrite)."""
        if await asyncio.to_thread(self.fs.exists, self.root):
            await asyncio.to_thread(self.fs.remove_tree, self.root)

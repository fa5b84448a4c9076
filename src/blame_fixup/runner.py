"""Per-file fixup driver: precondition check, target discovery, and error boundary."""

from __future__ import annotations

import logging
from collections.abc import Callable

from blame_fixup.aligner import AmbiguousSectionError, align_lines
from blame_fixup.applier import apply_fixups
from blame_fixup.blame import BlameParseError
from blame_fixup.git_client import GitBackend, GitCommandError
from blame_fixup.models import FileReport, LineRecord
from blame_fixup.patch_builder import build_patches

logger = logging.getLogger(__name__)

HEAD_REVISION = "HEAD"


class StagedChangesError(RuntimeError):
    """Raised when the index already holds staged changes."""

    def __init__(self, paths: list[str]):
        self.paths = paths
        super().__init__(f"Refusing to run with staged changes in: {', '.join(paths)}")


class FileTask:
    """One file to fix up; its aligned lines are computed on first access.

    Blame does not report whether a file ends with a newline, so both
    versions are checked alongside and kept as ``head_eol`` / ``working_eol``.
    """

    def __init__(self, path: str, backend: GitBackend):
        self.path = path
        self.backend = backend
        self.head_eol = True
        self.working_eol = True
        self._lines: list[LineRecord] | None = None

    @property
    def lines(self) -> list[LineRecord]:
        if self._lines is None:
            head = self.backend.blame(self.path, revision=HEAD_REVISION)
            working = self.backend.blame(self.path)
            self.head_eol = self.backend.ends_with_newline(self.path, revision=HEAD_REVISION)
            self.working_eol = self.backend.ends_with_newline(self.path)
            self._lines = align_lines(self.path, head, working)
        return self._lines


def check_preconditions(backend: GitBackend) -> None:
    staged = [entry.path for entry in backend.status() if entry.is_staged]
    if staged:
        raise StagedChangesError(staged)


def collect_targets(backend: GitBackend, path: str | None = None) -> list[str]:
    """Return ``[path]`` when given, otherwise every modified, unstaged file."""
    if path is not None:
        return [path]
    return [entry.path for entry in backend.status() if entry.is_modified]


def process_file(task: FileTask, backend: GitBackend, dry_run: bool = False) -> FileReport:
    """Align, build and (unless ``dry_run``) apply the fixups of one file.

    File-scoped failures are converted into the returned report.
    """
    try:
        lines = task.lines
        patches = build_patches(task.path, lines, head_eol=task.head_eol, working_eol=task.working_eol)
    except AmbiguousSectionError as exc:
        logger.warning("%s", exc)
        return FileReport(path=task.path, status="ambiguous", message=str(exc))
    except (BlameParseError, GitCommandError, UnicodeError, OSError) as exc:
        logger.warning("%s: %s", task.path, exc)
        return FileReport(path=task.path, status="failed", message=str(exc))

    unattributed = sum(1 for line in lines if line.unattributed)
    if not patches:
        return FileReport(path=task.path, status="clean", unattributed_lines=unattributed)
    if dry_run:
        return FileReport(path=task.path, status="fixed", patches=patches, unattributed_lines=unattributed)

    fixed, error = apply_fixups(backend, patches)
    if error is None:
        status = "fixed"
        message = ""
    else:
        status = "partial" if fixed else "failed"
        message = f"{len(patches) - len(fixed)} of {len(patches)} fixups not created: {error.stderr}"
    return FileReport(
        path=task.path,
        status=status,
        patches=patches,
        fixed_commits=fixed,
        unattributed_lines=unattributed,
        message=message,
    )


def run_fixup(
    backend: GitBackend,
    path: str | None = None,
    dry_run: bool = False,
    progress_callback: Callable[[FileReport], None] | None = None,
) -> list[FileReport]:
    """Fix up every target file in order and return one report per file.

    Raises:
        StagedChangesError: If the index already holds staged changes.
    """
    check_preconditions(backend)
    reports: list[FileReport] = []
    for target in collect_targets(backend, path):
        report = process_file(FileTask(target, backend), backend, dry_run=dry_run)
        reports.append(report)
        if progress_callback:
            progress_callback(report)
    return reports

from __future__ import annotations

import sys
from pathlib import Path

import pytest

ROOT = Path(__file__).resolve().parents[1]
SRC = ROOT / "src"
if str(SRC) not in sys.path:
    sys.path.insert(0, str(SRC))

from blame_fixup.git_client import GitCommandError
from blame_fixup.models import NOT_COMMITTED, BlameRecord, StatusEntry

C1 = "1" * 40
C2 = "2" * 40


def make_blame(*rows: tuple[str, str]) -> list[BlameRecord]:
    """Build blame records from ``(commit, content)`` pairs numbered from 1."""
    return [
        BlameRecord(owning_commit=commit, line_number=index, content=content)
        for index, (commit, content) in enumerate(rows, start=1)
    ]


def patch_sides(diff_text: str) -> tuple[list[str], list[str]]:
    """Return the full before/after file lines of a whole-file-context patch."""
    before: list[str] = []
    after: list[str] = []
    for line in diff_text.split("\n"):
        if line.startswith(("---", "+++", "@@")):
            continue
        if line.startswith("-"):
            before.append(line[1:])
        elif line.startswith("+"):
            after.append(line[1:])
        elif line.startswith(" "):
            before.append(line[1:])
            after.append(line[1:])
    return before, after


class FakeGitBackend:
    """In-memory ``GitBackend`` recording every staged patch, fixup commit and reset."""

    def __init__(
        self,
        status: list[StatusEntry] | None = None,
        blames: dict[tuple[str, str | None], list[BlameRecord]] | None = None,
        reject_patches: set[str] | None = None,
        reject_commits: set[str] | None = None,
        missing_newline: set[tuple[str, str | None]] | None = None,
    ) -> None:
        self.status_entries = status or []
        self.blames = blames or {}
        self.reject_patches = reject_patches or set()
        self.reject_commits = reject_commits or set()
        self.missing_newline = missing_newline or set()
        self.applied: list[str] = []
        self.commits: list[str] = []
        self.unstaged: list[str] = []

    def status(self) -> list[StatusEntry]:
        return list(self.status_entries)

    def blame(self, path: str, revision: str | None = None) -> list[BlameRecord]:
        key = (path, revision)
        if key not in self.blames:
            raise GitCommandError(["git", "blame", path], f"fatal: no such path '{path}'")
        return self.blames[key]

    def ends_with_newline(self, path: str, revision: str | None = None) -> bool:
        return (path, revision) not in self.missing_newline

    def apply_cached(self, patch_text: str) -> None:
        if any(marker in patch_text for marker in self.reject_patches):
            raise GitCommandError(["git", "apply", "--cached", "-"], "error: patch does not apply")
        self.applied.append(patch_text)

    def commit_fixup(self, commit: str) -> None:
        if commit in self.reject_commits:
            raise GitCommandError(["git", "commit", f"--fixup={commit}"], "pre-commit hook failed")
        self.commits.append(commit)

    def unstage(self, path: str) -> None:
        self.unstaged.append(path)


@pytest.fixture
def head_blame() -> list[BlameRecord]:
    return make_blame((C1, "L1"), (C1, "L2"), (C2, "L3"))


@pytest.fixture
def fake_backend_factory():
    def factory(
        files: dict[str, tuple[list[BlameRecord], list[BlameRecord]]],
        status: list[StatusEntry] | None = None,
        reject_patches: set[str] | None = None,
        reject_commits: set[str] | None = None,
    ) -> FakeGitBackend:
        blames: dict[tuple[str, str | None], list[BlameRecord]] = {}
        for path, (head, working) in files.items():
            blames[(path, "HEAD")] = head
            blames[(path, None)] = working
        if status is None:
            status = [StatusEntry(code=" M", path=path) for path in files]
        return FakeGitBackend(
            status=status,
            blames=blames,
            reject_patches=reject_patches,
            reject_commits=reject_commits,
        )

    return factory

"""Pydantic models shared across blame parsing, alignment, and patch building."""

from __future__ import annotations

from typing import Literal

from pydantic import BaseModel, ConfigDict

CommitId = str

NOT_COMMITTED = "0" * 40


class BlameRecord(BaseModel):
    """One blamed line of a file at a specific revision."""

    model_config = ConfigDict(frozen=True)

    owning_commit: CommitId
    line_number: int
    content: str


class StatusEntry(BaseModel):
    """A single ``git status --porcelain`` row."""

    model_config = ConfigDict(frozen=True)

    code: str
    path: str

    @property
    def is_staged(self) -> bool:
        return self.code[0] not in (" ", "?")

    @property
    def is_modified(self) -> bool:
        return self.code[1] == "M"


class LineRecord(BaseModel):
    """Aligned view of one line position across HEAD and the work tree.

    ``old_content`` is ``None`` when the position only exists in the work tree,
    ``new_content`` is ``None`` when the line was deleted. ``applied`` flips to
    ``True`` once a patch has folded this line's change in, after which the
    line renders as its new content whenever it is used as context.
    """

    changed: bool
    old_content: str | None = None
    new_content: str | None = None
    owning_commit: CommitId | None = None
    applied: bool = False

    @property
    def unattributed(self) -> bool:
        """Return ``True`` for brand-new lines that no commit can own."""
        return self.owning_commit is None and self.old_content is None and self.new_content is not None

    def contents_for_context(self) -> str | None:
        return self.new_content if self.applied else self.old_content


class Patch(BaseModel):
    """A unified diff that folds one commit's changed lines of one file."""

    model_config = ConfigDict(frozen=True)

    path: str
    target_commit: CommitId
    diff_text: str


FileStatus = Literal["clean", "fixed", "partial", "ambiguous", "failed"]


class FileReport(BaseModel):
    """Outcome of processing one file."""

    path: str
    status: FileStatus
    patches: list[Patch] = []
    fixed_commits: list[CommitId] = []
    unattributed_lines: int = 0
    message: str = ""

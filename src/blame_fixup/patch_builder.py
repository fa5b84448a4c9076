"""Build per-commit unified diffs from aligned line records."""

from __future__ import annotations

import difflib
import logging

from blame_fixup.grouper import group_by_commit
from blame_fixup.models import CommitId, LineRecord, Patch

logger = logging.getLogger(__name__)

NO_NEWLINE_MARKER = "\\ No newline at end of file\n"


def _last_index(lines: list[LineRecord], attr: str) -> int | None:
    for index in range(len(lines) - 1, -1, -1):
        if getattr(lines[index], attr) is not None:
            return index
    return None


def _terminate(
    rendered: list[tuple[int, str, str]],
    lines: list[LineRecord],
    head_eol: bool,
    working_eol: bool,
) -> list[str]:
    """Attach line endings; only the final rendered line can lack one.

    That line keeps HEAD's final-newline state when it is HEAD's last line as
    old content (or unchanged), and the work tree's state when it is the work
    tree's last line as new content.
    """
    texts = [text + "\n" for _, text, _ in rendered]
    if not rendered:
        return texts

    index, text, side = rendered[-1]
    last_old = _last_index(lines, "old_content")
    last_new = _last_index(lines, "new_content")
    if side == "old" or not lines[index].changed:
        has_eol = head_eol if index == last_old else working_eol if index == last_new else True
    else:
        has_eol = working_eol if index == last_new else True
    if not has_eol:
        texts[-1] = text
    return texts


def _unified_diff(path: str, before: list[str], after: list[str]) -> str:
    context = max(len(before), len(after))
    out: list[str] = []
    for line in difflib.unified_diff(before, after, fromfile=f"a/{path}", tofile=f"b/{path}", n=context):
        if line.endswith("\n"):
            out.append(line)
        else:
            out.append(line + "\n")
            out.append(NO_NEWLINE_MARKER)
    return "".join(out)


def build_commit_patch(
    path: str,
    lines: list[LineRecord],
    commit: CommitId,
    group: list[int],
    head_eol: bool = True,
    working_eol: bool = True,
) -> Patch | None:
    """Build the patch that folds ``group`` into the index, on top of earlier patches.

    Every line of the file is rendered twice. Lines in ``group`` contribute
    their old content before and their new content after, and are marked
    applied. All other lines contribute their current context on both sides,
    which already reflects groups applied earlier. Absent contents are dropped.

    Args:
        path: Repository-relative file path used in the diff headers.
        lines: The file's aligned records; mutated in place.
        commit: Target commit of this patch.
        group: Indexes into ``lines`` owned by ``commit``.
        head_eol: Whether the HEAD version of the file ends with a newline.
        working_eol: Whether the work-tree version ends with a newline.

    Returns:
        The patch, or ``None`` when the group leaves the file unchanged.
    """
    members = set(group)
    before: list[tuple[int, str, str]] = []
    after: list[tuple[int, str, str]] = []
    for index, line in enumerate(lines):
        if index in members:
            old, old_side = line.old_content, "old"
            new, new_side = line.new_content, "new"
            line.applied = True
        else:
            old = new = line.contents_for_context()
            old_side = new_side = "new" if line.applied else "old"
        if old is not None:
            before.append((index, old, old_side))
        if new is not None:
            after.append((index, new, new_side))

    before_text = _terminate(before, lines, head_eol, working_eol)
    after_text = _terminate(after, lines, head_eol, working_eol)
    if before_text == after_text:
        return None

    diff_text = _unified_diff(path, before_text, after_text)
    logger.debug("%s: patch for %s covers %d lines", path, commit[:8], len(group))
    return Patch(path=path, target_commit=commit, diff_text=diff_text)


def build_patches(path: str, lines: list[LineRecord], head_eol: bool = True, working_eol: bool = True) -> list[Patch]:
    """Build one patch per owning commit, in the order they must be applied."""
    patches: list[Patch] = []
    for commit, group in group_by_commit(lines).items():
        patch = build_commit_patch(path, lines, commit, group, head_eol=head_eol, working_eol=working_eol)
        if patch is not None:
            patches.append(patch)
    return patches

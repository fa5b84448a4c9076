from __future__ import annotations

from blame_fixup.models import CommitId, LineRecord


def group_by_commit(lines: list[LineRecord]) -> dict[CommitId, list[int]]:
    """Map each owning commit to the indexes of its changed lines, in file order.

    Commits appear in the order of their first changed line.
    """
    groups: dict[CommitId, list[int]] = {}
    for index, line in enumerate(lines):
        if not line.changed or line.owning_commit is None:
            continue
        groups.setdefault(line.owning_commit, []).append(index)
    return groups

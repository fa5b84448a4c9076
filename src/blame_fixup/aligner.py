"""Align HEAD blame against work-tree blame into per-position line records."""

from __future__ import annotations

import logging
from difflib import SequenceMatcher
from itertools import zip_longest

from blame_fixup.models import BlameRecord, LineRecord

logger = logging.getLogger(__name__)


class AmbiguousSectionError(ValueError):
    """Raised when an insert/delete region spans lines owned by several commits."""

    def __init__(self, path: str, head_span: list[BlameRecord], working_span: list[BlameRecord]):
        self.path = path
        self.head_span = head_span
        self.working_span = working_span
        first = head_span[0].line_number if head_span else 0
        last = head_span[-1].line_number if head_span else 0
        owners = sorted({record.owning_commit[:8] for record in head_span})
        super().__init__(
            f"{path}: ambiguous section at lines {first}-{last} "
            f"(owned by {', '.join(owners)}; {len(head_span)} -> {len(working_span)} lines)"
        )


def _key(record: BlameRecord) -> str:
    return f"{record.owning_commit}\x00{record.content}"


def _pair_equal_spans(head_span: list[BlameRecord], working_span: list[BlameRecord]) -> list[LineRecord]:
    return [
        LineRecord(
            changed=old.content != new.content,
            old_content=old.content,
            new_content=new.content,
            owning_commit=old.owning_commit,
        )
        for old, new in zip(head_span, working_span)
    ]


def _attribute_block(
    path: str,
    head_span: list[BlameRecord],
    working_span: list[BlameRecord],
) -> list[LineRecord]:
    """Attribute a net insertion or deletion to the single commit owning ``head_span``."""
    if not head_span:
        logger.debug("%s: %d unattributed inserted lines", path, len(working_span))
        return [LineRecord(changed=False, new_content=new.content) for new in working_span]

    owners = {record.owning_commit for record in head_span}
    if len(owners) != 1:
        raise AmbiguousSectionError(path, head_span, working_span)

    owner = owners.pop()
    records: list[LineRecord] = []
    for old, new in zip_longest(head_span, working_span):
        old_content = old.content if old is not None else None
        new_content = new.content if new is not None else None
        records.append(
            LineRecord(
                changed=old_content != new_content,
                old_content=old_content,
                new_content=new_content,
                owning_commit=owner,
            )
        )
    return records


def align_lines(path: str, head: list[BlameRecord], working: list[BlameRecord]) -> list[LineRecord]:
    """Align two blame sequences of the same file.

    Lines are keyed on owning commit plus content, so a line edited in the
    work tree (blamed to the not-yet-committed id) never matches its HEAD
    counterpart. Between matching blocks:

    - spans of equal length pair up line for line, owned by the HEAD side;
    - spans of different length are attributed as a block when every HEAD
      line shares one owner, otherwise the whole file is rejected;
    - pure insertions (empty HEAD span) stay unattributed.

    Args:
        path: File path, used for diagnostics.
        head: Blame of the committed revision.
        working: Blame of the work tree.

    Returns:
        Line records in file order.

    Raises:
        AmbiguousSectionError: If a net insert/delete region has mixed owners.
    """
    matcher = SequenceMatcher(None, [_key(r) for r in head], [_key(r) for r in working], autojunk=False)

    records: list[LineRecord] = []
    head_pos = 0
    working_pos = 0
    for head_start, working_start, size in matcher.get_matching_blocks():
        head_span = head[head_pos:head_start]
        working_span = working[working_pos:working_start]
        if head_span or working_span:
            if len(head_span) == len(working_span):
                records.extend(_pair_equal_spans(head_span, working_span))
            else:
                records.extend(_attribute_block(path, head_span, working_span))

        for record in head[head_start : head_start + size]:
            records.append(
                LineRecord(
                    changed=False,
                    old_content=record.content,
                    new_content=record.content,
                    owning_commit=record.owning_commit,
                )
            )
        head_pos = head_start + size
        working_pos = working_start + size

    logger.debug(
        "%s: aligned %d head / %d working lines into %d records (%d changed)",
        path,
        len(head),
        len(working),
        len(records),
        sum(1 for r in records if r.changed),
    )
    return records

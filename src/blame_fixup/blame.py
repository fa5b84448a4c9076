"""Parsers for ``git blame --porcelain`` and ``git status --porcelain`` output."""

from __future__ import annotations

import logging
import re

from blame_fixup.models import BlameRecord, StatusEntry

logger = logging.getLogger(__name__)

HEADER_RE = re.compile(r"^([0-9a-f]{40}|[0-9a-f]{64}) (\d+) (\d+)(?: (\d+))?$")


class BlameParseError(ValueError):
    """Raised when git produced output that does not follow the porcelain format."""


def parse_blame_porcelain(raw: str) -> list[BlameRecord]:
    """Parse ``git blame --porcelain`` output into ordered per-line records.

    Each blamed line starts with ``<sha> <orig_line> <final_line> [<count>]``.
    The first occurrence of a commit is followed by its metadata headers
    (``author``, ``summary``, ``filename`` ...); later occurrences may carry
    only ``previous``/``filename``. Every group ends with the line content
    prefixed by a single tab.

    Args:
        raw: Raw stdout of ``git blame --porcelain``.

    Returns:
        Records ordered by their final line number.

    Raises:
        BlameParseError: If a header or content line is missing or malformed.
    """
    lines = raw.split("\n")
    if lines and lines[-1] == "":
        lines.pop()

    records: list[BlameRecord] = []
    i = 0
    while i < len(lines):
        header = lines[i]
        match = HEADER_RE.match(header)
        if not match:
            raise BlameParseError(f"Unexpected blame header at line {i + 1}: {header!r}")

        sha = match.group(1)
        final_line = int(match.group(3))
        i += 1

        while i < len(lines) and not lines[i].startswith("\t"):
            if HEADER_RE.match(lines[i]):
                raise BlameParseError(f"Missing content line for {sha[:8]} line {final_line}")
            i += 1

        if i >= len(lines):
            raise BlameParseError(f"Truncated blame output for {sha[:8]} line {final_line}")

        records.append(BlameRecord(owning_commit=sha, line_number=final_line, content=lines[i][1:]))
        i += 1

    for expected, record in enumerate(records, start=1):
        if record.line_number != expected:
            raise BlameParseError(f"Blame lines out of order: expected {expected}, got {record.line_number}")

    logger.debug("parsed %d blame records", len(records))
    return records


def parse_status_porcelain(raw: str) -> list[StatusEntry]:
    """Parse ``git status --porcelain -z`` output.

    Records are NUL-terminated ``XY path`` entries with paths left unquoted.
    A rename or copy is followed by one extra NUL-terminated field holding the
    source path; the entry keeps the destination path.
    """
    fields = raw.split("\0")
    if fields and fields[-1] == "":
        fields.pop()

    entries: list[StatusEntry] = []
    i = 0
    while i < len(fields):
        record = fields[i]
        i += 1
        if len(record) < 4 or record[2] != " ":
            raise BlameParseError(f"Malformed status record: {record!r}")

        code, path = record[:2], record[3:]
        if "R" in code or "C" in code:
            if i >= len(fields):
                raise BlameParseError(f"Missing source path for rename of {path!r}")
            i += 1
        entries.append(StatusEntry(code=code, path=path))
    return entries

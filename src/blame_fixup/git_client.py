"""Subprocess adapter around the git binary."""

from __future__ import annotations

import logging
import subprocess
from pathlib import Path
from typing import Protocol

from blame_fixup.blame import parse_blame_porcelain, parse_status_porcelain
from blame_fixup.models import BlameRecord, CommitId, StatusEntry

logger = logging.getLogger(__name__)

# File contents reach us in arbitrary encodings; surrogateescape round-trips the raw bytes.
ENCODING = "utf-8"
ERRORS = "surrogateescape"


class GitCommandError(RuntimeError):
    """Raised when a git invocation exits with a non-zero status."""

    def __init__(self, cmd: list[str], stderr: str):
        self.cmd = cmd
        self.stderr = stderr
        super().__init__(f"Command failed ({' '.join(cmd)}): {stderr}")


class GitBackend(Protocol):
    """The git primitives fixup needs; everything else is pure text processing."""

    def status(self) -> list[StatusEntry]: ...

    def blame(self, path: str, revision: str | None = None) -> list[BlameRecord]: ...

    def ends_with_newline(self, path: str, revision: str | None = None) -> bool: ...

    def apply_cached(self, patch_text: str) -> None: ...

    def commit_fixup(self, commit: CommitId) -> None: ...

    def unstage(self, path: str) -> None: ...


def decode(raw: bytes) -> str:
    return raw.decode(ENCODING, ERRORS)


def encode(text: str) -> bytes:
    return text.encode(ENCODING, ERRORS)


def run_cmd_bytes(cmd: list[str], input_bytes: bytes | None = None) -> bytes:
    """Run a command and return raw stdout, raising on failure."""
    logger.debug("running %s", " ".join(cmd))
    proc = subprocess.run(cmd, input=input_bytes, capture_output=True, check=False)
    if proc.returncode != 0:
        raise GitCommandError(cmd, proc.stderr.decode(ENCODING, "replace").strip())
    return proc.stdout


def run_cmd(cmd: list[str], input_text: str | None = None) -> str:
    """Run a command and return stdout decoded without newline translation."""
    input_bytes = encode(input_text) if input_text is not None else None
    return decode(run_cmd_bytes(cmd, input_bytes=input_bytes))


class GitClient:
    """``GitBackend`` implementation that shells out to git in ``repo_path``."""

    def __init__(self, repo_path: Path = Path("."), git_binary: str = "git", no_verify: bool = True):
        self.repo_path = Path(repo_path)
        self.git_binary = git_binary
        self.no_verify = no_verify

    def _cmd(self, args: list[str]) -> list[str]:
        return [self.git_binary, "-C", str(self.repo_path), *args]

    def _git(self, args: list[str], input_text: str | None = None) -> str:
        return run_cmd(self._cmd(args), input_text=input_text)

    def status(self) -> list[StatusEntry]:
        return parse_status_porcelain(self._git(["status", "--porcelain", "-z"]))

    def blame(self, path: str, revision: str | None = None) -> list[BlameRecord]:
        """Blame ``path`` at ``revision``, or the work tree when ``revision`` is ``None``."""
        args = ["blame", "--porcelain"]
        if revision:
            args.append(revision)
        args.extend(["--", path])
        return parse_blame_porcelain(self._git(args))

    def ends_with_newline(self, path: str, revision: str | None = None) -> bool:
        """Return ``False`` only when the file is non-empty and lacks a final newline."""
        if revision:
            content = run_cmd_bytes(self._cmd(["cat-file", "-p", f"{revision}:{path}"]))
            return not content or content.endswith(b"\n")

        with (self.repo_path / path).open("rb") as handle:
            handle.seek(0, 2)
            if handle.tell() == 0:
                return True
            handle.seek(-1, 2)
            return handle.read(1) == b"\n"

    def apply_cached(self, patch_text: str) -> None:
        self._git(["apply", "--cached", "-"], input_text=patch_text)

    def commit_fixup(self, commit: CommitId) -> None:
        args = ["commit", f"--fixup={commit}"]
        if self.no_verify:
            args.append("--no-verify")
        self._git(args)

    def unstage(self, path: str) -> None:
        """Reset the index entry of ``path`` back to HEAD."""
        self._git(["reset", "-q", "--", path])

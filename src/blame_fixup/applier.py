from __future__ import annotations

import logging

from blame_fixup.git_client import GitBackend, GitCommandError
from blame_fixup.models import CommitId, Patch

logger = logging.getLogger(__name__)


def apply_fixups(backend: GitBackend, patches: list[Patch]) -> tuple[list[CommitId], GitCommandError | None]:
    """Stage each patch and commit it as a fixup of its target, in order.

    Later patches of a file are built against the state left by earlier ones,
    so the first patch that fails to stage or commit abandons the rest.
    Fixups created before the failure are kept. A patch that was staged but
    could not be committed is unstaged again, so no later fixup picks it up.

    Returns:
        The commits that received a fixup, and the git error if one stopped
        the run.

    Raises:
        GitCommandError: If the index cannot be reset after a failed commit.
    """
    fixed: list[CommitId] = []
    for patch in patches:
        try:
            backend.apply_cached(patch.diff_text)
        except GitCommandError as exc:
            logger.warning("%s: patch for %s rejected: %s", patch.path, patch.target_commit[:8], exc.stderr)
            return fixed, exc

        try:
            backend.commit_fixup(patch.target_commit)
        except GitCommandError as exc:
            logger.warning("%s: fixup commit for %s failed: %s", patch.path, patch.target_commit[:8], exc.stderr)
            backend.unstage(patch.path)
            return fixed, exc

        fixed.append(patch.target_commit)
        logger.info("%s: created fixup for %s", patch.path, patch.target_commit[:8])
    return fixed, None

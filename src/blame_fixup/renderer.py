"""Write planned fixup patches to disk instead of applying them."""

from __future__ import annotations

from pathlib import Path

from blame_fixup.git_client import encode
from blame_fixup.models import Patch


def patch_filename(index: int, patch: Patch) -> str:
    """Build a sortable, filesystem-safe name such as ``001-1a2b3c4d-src_app.py.patch``."""
    flat_path = patch.path.replace("/", "_").replace("\\", "_")
    return f"{index:03d}-{patch.target_commit[:8]}-{flat_path}.patch"


def render_patches(patches: list[Patch], output_root: Path) -> list[Path]:
    """Write ``patches`` into ``output_root`` in application order.

    Args:
        patches: Patches in the order they would be staged.
        output_root: Directory to create and fill.

    Returns:
        The written file paths.
    """
    output_root.mkdir(parents=True, exist_ok=True)
    written: list[Path] = []
    for index, patch in enumerate(patches, start=1):
        target = output_root / patch_filename(index, patch)
        target.write_bytes(encode(patch.diff_text))
        written.append(target)
    return written

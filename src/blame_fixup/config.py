"""Runtime settings resolved from CLI options, environment, and defaults."""

from __future__ import annotations

from pathlib import Path

from pydantic_settings import BaseSettings, SettingsConfigDict

ENV_PREFIX = "BLAME_FIXUP_"


class FixupSettings(BaseSettings):
    """Settings read from ``BLAME_FIXUP_*`` environment variables.

    ``BLAME_FIXUP_GIT_BINARY`` selects the git executable and
    ``BLAME_FIXUP_NO_VERIFY`` toggles commit hooks (``1``/``true``/``on`` skip them).
    """

    model_config = SettingsConfigDict(env_prefix=ENV_PREFIX)

    repo_path: Path = Path(".")
    git_binary: str = "git"
    no_verify: bool = True


def load_settings(
    repo_path: Path | None = None,
    git_binary: str | None = None,
    no_verify: bool | None = None,
) -> FixupSettings:
    """Resolve settings; explicit arguments win over the environment, which wins over defaults."""
    overrides = {
        name: value
        for name, value in (("repo_path", repo_path), ("git_binary", git_binary), ("no_verify", no_verify))
        if value is not None
    }
    return FixupSettings(**overrides)

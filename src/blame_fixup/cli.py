"""Typer-based CLI for folding work-tree edits back into the commits that own them."""

from __future__ import annotations

import logging
from pathlib import Path

import typer

from blame_fixup.blame import BlameParseError
from blame_fixup.config import load_settings
from blame_fixup.git_client import GitClient, GitCommandError, encode
from blame_fixup.models import FileReport
from blame_fixup.renderer import render_patches
from blame_fixup.runner import StagedChangesError, collect_targets, run_fixup

app = typer.Typer(add_completion=False, help="blame-fixup: create fixup commits from blame attribution")


def _configure_logging(verbose: bool) -> None:
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
    )


def _echo_report(report: FileReport) -> None:
    """Print a one-line summary for a processed file."""
    if report.status == "ambiguous":
        typer.echo(f"skipped {report.message}", err=True)
        return
    if report.status in ("failed", "partial"):
        typer.echo(f"{report.status} {report.path}: {report.message}", err=True)
    elif report.status == "clean":
        typer.echo(f"nothing to fix up in {report.path}")
    else:
        targets = report.fixed_commits or [patch.target_commit for patch in report.patches]
        typer.echo(f"{report.path}: {len(targets)} fixup(s) -> {', '.join(c[:8] for c in targets)}")

    if report.unattributed_lines:
        typer.echo(f"    {report.unattributed_lines} new line(s) left in work tree (no owning commit)")


@app.command("fixup")
def fixup(
    path: str | None = typer.Argument(None, help="File to fix up; defaults to every modified file"),
    repo: Path = typer.Option(Path("."), "--repo", help="Repository to operate on"),
    git_binary: str | None = typer.Option(None, "--git", help="git executable (env BLAME_FIXUP_GIT_BINARY)"),
    dry_run: bool = typer.Option(False, "--dry-run", help="Print patches instead of committing"),
    emit_dir: Path | None = typer.Option(None, "--emit-dir", help="Write patches here (implies --dry-run)"),
    verify: bool | None = typer.Option(
        None, "--verify/--no-verify", help="Run commit hooks (env BLAME_FIXUP_NO_VERIFY)"
    ),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Enable debug logging"),
) -> None:
    """Create one fixup commit per owning commit for each modified file."""
    _configure_logging(verbose)
    settings = load_settings(
        repo_path=repo,
        git_binary=git_binary,
        no_verify=None if verify is None else not verify,
    )
    backend = GitClient(settings.repo_path, git_binary=settings.git_binary, no_verify=settings.no_verify)
    preview = dry_run or emit_dir is not None

    try:
        reports = run_fixup(backend, path=path, dry_run=preview, progress_callback=_echo_report)
    except (StagedChangesError, GitCommandError, BlameParseError) as exc:
        typer.echo(f"error: {exc}", err=True)
        raise typer.Exit(code=1) from exc

    patches = [patch for report in reports for patch in report.patches]
    if emit_dir is not None:
        written = render_patches(patches, emit_dir)
        typer.echo(f"Wrote {len(written)} patch(es) to {emit_dir}")
    elif dry_run:
        for patch in patches:
            typer.echo(f"# fixup! {patch.target_commit}")
            typer.echo(encode(patch.diff_text), nl=False)

    problems = [report for report in reports if report.status in ("ambiguous", "failed", "partial")]
    if problems:
        typer.echo(f"{len(problems)} file(s) not fully fixed up: {', '.join(r.path for r in problems)}", err=True)


@app.command("doctor")
def doctor(
    repo: Path = typer.Option(Path("."), "--repo", help="Repository to inspect"),
) -> None:
    """Print the git setup and index state fixup would run against."""
    settings = load_settings(repo_path=repo)
    backend = GitClient(settings.repo_path, git_binary=settings.git_binary, no_verify=settings.no_verify)
    typer.echo(f"git binary: {settings.git_binary}")
    typer.echo(f"skip commit hooks: {settings.no_verify}")
    try:
        entries = backend.status()
    except (GitCommandError, BlameParseError) as exc:
        typer.echo(f"error: {exc}", err=True)
        raise typer.Exit(code=1) from exc

    staged = [entry.path for entry in entries if entry.is_staged]
    typer.echo(f"staged changes: {len(staged)}")
    typer.echo(f"files to fix up: {len(collect_targets(backend))}")


if __name__ == "__main__":
    app()

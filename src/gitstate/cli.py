"""gitstate CLI — Typer application with status, diff, and init commands."""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Optional

import typer
from rich.console import Console
from rich.logging import RichHandler

from gitstate import __version__

app = typer.Typer(
    name="gitstate",
    help="Parsed diffs and consolidated working-tree status for git.",
    add_completion=False,
    no_args_is_help=True,
)

console = Console(stderr=True)


def _setup_logging(verbose: bool, debug: bool) -> None:
    """Route library logging to stderr through Rich."""
    if not (verbose or debug):
        return
    logging.basicConfig(
        level=logging.DEBUG if debug else logging.INFO,
        format="%(message)s",
        handlers=[RichHandler(console=console, show_path=debug)],
        force=True,
    )


def _resolve_repo_root() -> Path:
    """Find the git repo root, exit 2 on failure."""
    from gitstate.git.adapter import GitError, get_repo_root

    try:
        return get_repo_root()
    except GitError as exc:
        console.print(f"[bold red]Error:[/bold red] {exc}")
        raise typer.Exit(code=2) from exc


def _load(repo_root: Path, config: Optional[str], format: Optional[str]):
    from gitstate.config.loader import ConfigError, load_config
    from gitstate.config.schema import OUTPUT_FORMATS

    try:
        cfg = load_config(repo_root, config)
    except ConfigError as exc:
        console.print(f"[bold red]Config error:[/bold red] {exc}")
        raise typer.Exit(code=2) from exc

    if format:
        if format not in OUTPUT_FORMATS:
            console.print(f"[bold red]Invalid format:[/bold red] {format}")
            raise typer.Exit(code=2)
        cfg.output.format = format  # type: ignore[assignment]
    return cfg


# ── status ────────────────────────────────────────────────────────────────────


@app.command()
def status(
    config: Optional[str] = typer.Option(None, "--config", "-c", help="Path to .gitstate.toml"),
    format: Optional[str] = typer.Option(None, "--format", "-f", help="Output format: terminal | json"),
    base: Optional[str] = typer.Option(None, "--base", help="Revision staged changes are compared to"),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Verbose output"),
    debug: bool = typer.Option(False, "--debug", help="Log every git invocation"),
) -> None:
    """Show staged, unstaged, and untracked changes per path."""
    from gitstate.git.adapter import GitError, GitRepository
    from gitstate.output import json_report, terminal
    from gitstate.status.reconciler import Status

    _setup_logging(verbose, debug)
    repo_root = _resolve_repo_root()
    cfg = _load(repo_root, config, format)
    if base:
        cfg.git.base_rev = base

    repo = GitRepository(repo_root, binary=cfg.git.binary, timeout=cfg.git.timeout)
    try:
        result = Status.from_backend(repo, cfg.git.base_rev)
    except (GitError, ValueError) as exc:
        console.print(f"[bold red]Git error:[/bold red] {exc}")
        raise typer.Exit(code=2) from exc

    if cfg.output.format == "json":
        print(json_report.render_status(result))
    else:
        terminal.render_status(result, show_summary=cfg.output.show_summary)


# ── diff ──────────────────────────────────────────────────────────────────────


@app.command()
def diff(
    path: Optional[str] = typer.Argument(None, help="Limit the diff to this path"),
    cached: bool = typer.Option(False, "--cached", "--staged", help="Diff the index against the base revision"),
    base: Optional[str] = typer.Option(None, "--base", help="Revision --cached compares the index to"),
    stat: bool = typer.Option(False, "--stat", help="Only show per-file counts"),
    config: Optional[str] = typer.Option(None, "--config", "-c", help="Path to .gitstate.toml"),
    format: Optional[str] = typer.Option(None, "--format", "-f", help="Output format: terminal | json"),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Verbose output"),
    debug: bool = typer.Option(False, "--debug", help="Log every git invocation"),
) -> None:
    """Show the working (or staged) diff as parsed per-file records."""
    from gitstate.git.adapter import GitError, GitRepository
    from gitstate.git.diff_parser import DiffParser, MalformedDiff
    from gitstate.output import json_report, terminal

    _setup_logging(verbose, debug)
    repo_root = _resolve_repo_root()
    cfg = _load(repo_root, config, format)

    repo = GitRepository(repo_root, binary=cfg.git.binary, timeout=cfg.git.timeout)
    try:
        text = repo.run_diff(staged=cached, path=path, base_rev=base or cfg.git.base_rev)
        records = DiffParser(text).parse()
    except GitError as exc:
        console.print(f"[bold red]Git error:[/bold red] {exc}")
        raise typer.Exit(code=2) from exc
    except MalformedDiff as exc:
        console.print(f"[bold red]Unparseable diff:[/bold red] {exc}")
        raise typer.Exit(code=2) from exc

    if cfg.output.format == "json":
        print(json_report.render_diff(records))
    else:
        terminal.render_diff(
            records, stat_only=stat, show_summary=cfg.output.show_summary
        )


# ── init ──────────────────────────────────────────────────────────────────────


@app.command()
def init() -> None:
    """Generate a starter .gitstate.toml in the repo root."""
    from gitstate.config.defaults import DEFAULT_TOML
    from gitstate.config.loader import CONFIG_FILENAME

    repo_root = _resolve_repo_root()
    config_path = repo_root / CONFIG_FILENAME

    if config_path.exists():
        console.print(f"[yellow]⚠[/yellow]  {CONFIG_FILENAME} already exists at {config_path}")
        raise typer.Exit(code=1)

    config_path.write_text(DEFAULT_TOML, encoding="utf-8")
    console.print(f"[green]✓[/green] Created {config_path}")


# ── version ───────────────────────────────────────────────────────────────────


def _version_callback(value: bool) -> None:
    if value:
        print(f"gitstate {__version__}")
        raise typer.Exit()


@app.callback()
def main(
    version: bool = typer.Option(
        False, "--version", "-V", callback=_version_callback,
        is_eager=True, help="Show version and exit",
    ),
) -> None:
    """gitstate — parsed diffs and working-tree status for git."""

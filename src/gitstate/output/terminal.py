"""Rich terminal reporter — colour-coded status and diff tables."""

from __future__ import annotations

from typing import List, Optional

from rich.console import Console
from rich.syntax import Syntax
from rich.table import Table
from rich.text import Text

from gitstate.git.models import DiffRecord
from gitstate.git.stats import count_changes, summarize
from gitstate.status.models import ChangeKind, StatusEntry
from gitstate.status.reconciler import Status

_ABBREV = 7

_KIND_STYLE = {
    ChangeKind.ADDED: "bold green",
    ChangeKind.DELETED: "bold red",
    ChangeKind.MODIFIED: "bold yellow",
    ChangeKind.UNTRACKED: "bold bright_cyan",
}


def _kind_pill(entry: StatusEntry) -> Text:
    return Text(f" {entry.kind.value.upper()} ", style=_KIND_STYLE.get(entry.kind, ""))


def render_status(
    status: Status,
    *,
    show_summary: bool = True,
    console: Optional[Console] = None,
) -> None:
    """Print the working-tree status as a table."""
    console = console or Console()

    if len(status) == 0:
        console.print("[bold green]Working tree clean.[/bold green]")
        return

    table = Table(title="Working Tree Status", title_style="bold", border_style="dim")
    table.add_column("State", justify="center", width=12)
    table.add_column("Path", style="magenta")
    table.add_column("Staged", justify="center")
    table.add_column("Repo", style="dim")
    table.add_column("Index", style="dim")

    entries: List[StatusEntry] = sorted(status, key=lambda e: (e.path, not e.staged))
    for entry in entries:
        table.add_row(
            _kind_pill(entry),
            entry.path,
            "[green]yes[/green]" if entry.changes_staged else "no",
            (entry.id_repo or "-")[:_ABBREV],
            (entry.id_index or "-")[:_ABBREV],
        )
    console.print(table)

    if show_summary:
        console.print()
        console.print(f"[dim]Staged:[/dim]     {len(status.staged_changes)}")
        console.print(f"[dim]Unstaged:[/dim]   {len(status.unstaged_changes)}")
        console.print(f"[dim]Untracked:[/dim]  {len(status.untracked)}")


def render_diff(
    records: List[DiffRecord],
    *,
    stat_only: bool = False,
    show_summary: bool = True,
    console: Optional[Console] = None,
) -> None:
    """Print parsed diff records, with bodies unless *stat_only*."""
    console = console or Console()

    if not records:
        console.print("[dim]No differences.[/dim]")
        return

    for record in records:
        insertions, deletions = count_changes(record.body)
        label = record.b_path
        if record.is_renamed:
            label = f"{record.a_path} → {record.b_path}"
        flags = []
        if record.is_new:
            flags.append("[green]new[/green]")
        if record.is_deleted:
            flags.append("[red]deleted[/red]")
        if record.is_mode_change:
            flags.append(f"[yellow]mode {record.a_mode} → {record.b_mode}[/yellow]")
        console.print(
            f"[bold cyan]{label}[/bold cyan]  "
            f"[green]+{insertions}[/green] [red]-{deletions}[/red]  " + " ".join(flags)
        )
        if not stat_only and record.body is not None:
            console.print(Syntax(record.body, "diff", theme="ansi_dark", word_wrap=True))

    if show_summary:
        console.print()
        console.print(f"[dim]{summarize(records)}[/dim]")

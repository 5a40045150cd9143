"""
Rich renderables for fix and undo sessions.

Pure presentation: every function takes data + a Console and prints.
No engine calls, no prompts.
"""

from __future__ import annotations

from rich.console import Console, Group
from rich.markup import escape
from rich.panel import Panel
from rich.table import Table
from rich.text import Text

from nvcheckup.remediate.models import ChangeJournalEntry, RemediationAction, RemediationResult
from nvcheckup.ui.theme import (
    COLOR_BRAND,
    COLOR_COMMAND,
    COLOR_DIM,
    COLOR_TEXT,
    ICON_LOCK,
    ICON_REBOOT,
    JOURNAL_STATUS_ICONS,
    JOURNAL_STATUS_STYLES,
    RISK_BORDERS,
    RISK_STYLES,
)


# ── Action catalog ────────────────────────────────────────────────────────────

def print_action_list(
    actions: list[RemediationAction],
    console: Console,
    detailed: bool = False,
) -> None:
    """Table of available actions; ``detailed`` adds description + requirements."""
    table = Table(
        title="Available remediation actions",
        title_justify="left",
        title_style=f"bold {COLOR_BRAND}",
        show_edge=False,
        pad_edge=False,
        box=None,
    )
    table.add_column("ID", style=COLOR_COMMAND, no_wrap=True)
    table.add_column("Risk", no_wrap=True)
    table.add_column("Action", style=COLOR_TEXT)

    for action in actions:
        title = Text(action.title)
        if detailed:
            title.append(f"\n{action.description}", style=COLOR_DIM)
            if action.needs_admin:
                title.append("\nRequires: elevated/admin privileges", style=COLOR_DIM)
            if action.needs_reboot:
                title.append("\nNote: reboot required after applying", style=COLOR_DIM)
        table.add_row(
            action.id,
            Text(action.risk, style=RISK_STYLES.get(action.risk, COLOR_DIM)),
            title,
        )

    console.print()
    console.print(table)
    console.print()


# ── Preview ───────────────────────────────────────────────────────────────────

def print_preview_card(action: RemediationAction, preview: str, console: Console) -> None:
    """Engine.preview() text inside a Panel whose border follows risk."""
    parts: list = [Text(preview.rstrip("\n"), style=COLOR_TEXT), Text("")]

    meta = [f"risk: {action.risk}"]
    if action.needs_admin:
        meta.append(f"{ICON_LOCK} admin")
    if action.needs_reboot:
        meta.append(f"{ICON_REBOOT} reboot")
    if action.category:
        meta.append(action.category)
    parts.append(Text("  ·  ".join(meta), style=COLOR_DIM))

    console.print()
    console.print(
        Panel(
            Group(*parts),
            title=f"[bold]{action.id}[/bold]",
            title_align="left",
            border_style=RISK_BORDERS.get(action.risk, "dim"),
            padding=(0, 1),
        )
    )


# ── Results ───────────────────────────────────────────────────────────────────

def print_apply_result(
    result: RemediationResult,
    action: RemediationAction,
    console: Console,
) -> None:
    if result.dry_run:
        console.print(f"\n  [dim]{escape(result.output)}[/dim]")
        console.print("  [dim][DRY RUN] No changes were made.[/dim]\n")
        return

    if result.success:
        console.print(f"\n  [bright_green]✅  Applied:[/bright_green] {escape(result.output)}")
        if action.needs_reboot:
            console.print("  [yellow]A reboot is required for this change to take effect.[/yellow]")
        console.print()
        return

    console.print(f"\n  [red]❌  Failed:[/red] {escape(result.error or 'unknown error')}")
    if result.output:
        console.print(f"  [dim]{escape(result.output)}[/dim]")
    console.print()


# ── Journal ───────────────────────────────────────────────────────────────────

def print_journal(entries: list[ChangeJournalEntry], console: Console) -> None:
    """Numbered journal listing, oldest first."""
    table = Table(
        title="Change journal",
        title_justify="left",
        title_style=f"bold {COLOR_BRAND}",
        show_edge=False,
        pad_edge=False,
        box=None,
    )
    table.add_column("#", style=COLOR_DIM, justify="right")
    table.add_column("Status", no_wrap=True)
    table.add_column("ID", style=COLOR_COMMAND, no_wrap=True)
    table.add_column("Title", style=COLOR_TEXT)
    table.add_column("Applied", style=COLOR_DIM, no_wrap=True)

    for i, entry in enumerate(entries, 1):
        status = entry.status
        badge = Text(f"{JOURNAL_STATUS_ICONS.get(status, '·')} {status}")
        badge.stylize(JOURNAL_STATUS_STYLES.get(status, COLOR_DIM))
        table.add_row(
            str(i),
            badge,
            entry.action_id,
            entry.title,
            entry.applied_at.astimezone().strftime("%Y-%m-%d %H:%M:%S"),
        )

    console.print()
    console.print(table)
    console.print()

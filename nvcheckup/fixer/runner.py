"""
Fix and undo session orchestrators.

Thin layer between the CLI and the Engine: look up the action or journal
entry, show it, ask once, run, report. Returns a process exit code.

  run_fix_session  — list actions, or preview → confirm → apply one
  run_undo_session — list the journal, or confirm → undo one entry

Confirmation uses an arrow-key menu on a TTY and a plain y/N prompt
otherwise. ``assume_yes`` skips both.
"""

from __future__ import annotations

import sys

import click
from rich.console import Console
from rich.markup import escape

from nvcheckup.remediate import (
    ActionFailedError,
    Engine,
    JournalError,
    RemediationError,
)
from nvcheckup.ui.cards import (
    print_action_list,
    print_apply_result,
    print_journal,
    print_preview_card,
)


EXIT_OK = 0
EXIT_ERROR = 1


# ── Fix ───────────────────────────────────────────────────────────────────────

def run_fix_session(
    engine: Engine,
    console: Console,
    action_id: str | None = None,
    show_all: bool = False,
    assume_yes: bool = False,
) -> int:
    """
    Args:
        engine:     Configured Engine (dry-run or live).
        console:    Rich Console shared with the rest of the tool.
        action_id:  Action to apply; None lists the catalog instead.
        show_all:   List every action with full descriptions.
        assume_yes: Apply without asking.
    """
    actions = engine.list_available()

    if not actions:
        console.print("\n  [dim]No remediation actions available for this platform.[/dim]\n")
        return EXIT_OK

    if action_id is None or show_all:
        print_action_list(actions, console, detailed=show_all or engine.dry_run)
        if not show_all:
            console.print("  [dim]Use:[/dim] nvcheckup fix --id <action-id>  [dim]to apply a fix[/dim]")
            console.print("       nvcheckup fix --id <action-id> --dry-run  [dim]to preview[/dim]\n")
        return EXIT_OK

    action = engine.get_action(action_id)
    if action is None:
        console.print(f"[red]Unknown action ID:[/red] {escape(action_id)}")
        console.print("[dim]Run 'nvcheckup fix' to see available actions.[/dim]")
        return EXIT_ERROR

    print_preview_card(action, engine.preview(action), console)

    if not engine.dry_run and not assume_yes:
        if not _confirm(console, "Apply this fix?", yes_label="Yes, apply"):
            console.print("  [dim]Aborted.[/dim]\n")
            return EXIT_OK

    try:
        result = engine.apply(action)
    except JournalError as e:
        if e.result is not None:
            print_apply_result(e.result, action, console)
        console.print(f"  [yellow]⚠️   {escape(str(e))}[/yellow]\n")
        return EXIT_ERROR
    except RemediationError as e:
        console.print(f"\n  [red]❌  Error:[/red] {escape(str(e))}\n")
        return EXIT_ERROR

    print_apply_result(result, action, console)
    return EXIT_OK if result.success else EXIT_ERROR


# ── Undo ──────────────────────────────────────────────────────────────────────

def run_undo_session(
    engine: Engine,
    console: Console,
    action_id: str | None = None,
    assume_yes: bool = False,
) -> int:
    """Undo the most recent undoable journal entry for action_id, or list the journal."""
    try:
        entries = engine.journal.read()
    except JournalError as e:
        console.print(f"[red]Error reading change journal:[/red] {escape(str(e))}")
        return EXIT_ERROR

    if not entries:
        console.print("\n  [dim]No changes recorded in the journal.[/dim]\n")
        return EXIT_OK

    if action_id is None:
        print_journal(entries, console)
        console.print("  [dim]Use:[/dim] nvcheckup undo --id <action-id>  [dim]to reverse a change[/dim]\n")
        return EXIT_OK

    target = engine.journal.find_undoable(action_id)
    if target is None:
        console.print(f"[red]No undoable entry found for action:[/red] {escape(action_id)}")
        return EXIT_ERROR

    applied = target.applied_at.astimezone().strftime("%Y-%m-%d %H:%M:%S")
    console.print(f"\n  Undoing: [bold]{escape(target.title)}[/bold] [dim](applied {applied})[/dim]")

    if not engine.dry_run and not assume_yes:
        if not _confirm(console, "Proceed?", yes_label="Yes, undo"):
            console.print("  [dim]Aborted.[/dim]\n")
            return EXIT_OK

    try:
        engine.undo(target)
    except JournalError as e:
        if e.undo_error is None:
            console.print("  [bright_green]✅  Undo command succeeded.[/bright_green]")
        else:
            console.print(f"\n  [red]❌  Undo failed:[/red] {escape(str(e.undo_error))}")
        console.print(f"  [yellow]⚠️   {escape(str(e))}[/yellow]\n")
        return EXIT_ERROR
    except ActionFailedError as e:
        console.print(f"\n  [red]❌  Undo failed:[/red] {escape(str(e))}\n")
        return EXIT_ERROR
    except RemediationError as e:
        console.print(f"\n  [red]❌  Error:[/red] {escape(str(e))}\n")
        return EXIT_ERROR

    if engine.dry_run:
        console.print("  [dim][DRY RUN] No changes were made.[/dim]\n")
    else:
        console.print("  [bright_green]✅  Successfully undone.[/bright_green]\n")
    return EXIT_OK


# ── Prompt ────────────────────────────────────────────────────────────────────

def _confirm(console: Console, question: str, yes_label: str) -> bool:
    """Ask once. Default is always No."""
    console.print(f"\n  [bold]{question}[/bold]")

    # simple-term-menu has no Windows backend
    if not sys.stdin.isatty() or sys.platform == "win32":
        return click.confirm("  ", default=False, show_default=True)

    from simple_term_menu import TerminalMenu

    menu = TerminalMenu(
        ["No, skip", yes_label],
        menu_cursor="› ",
        menu_cursor_style=("fg_cyan", "bold"),
        menu_highlight_style=("fg_cyan", "bold"),
        cursor_index=0,
    )
    return menu.show() == 1

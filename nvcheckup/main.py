"""
NVCheckup — entry point.

CLI flags, config resolution, logging setup, session dispatch.
"""

import logging
from pathlib import Path
from typing import Optional

import click
from rich.console import Console
from rich.logging import RichHandler

from nvcheckup import __version__
from nvcheckup.config import load_config
from nvcheckup.remediate import Engine
from nvcheckup.ui.theme import NVCHECKUP_THEME


# ── Console (shared across the tool) ─────────────────────────────────────────

console = Console(theme=NVCHECKUP_THEME)


# ── Logging ───────────────────────────────────────────────────────────────────

def _configure_logging(verbose: bool) -> None:
    """Route library logging to stderr through Rich. WARNING unless --verbose."""
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(message)s",
        datefmt="[%X]",
        handlers=[RichHandler(console=Console(stderr=True), show_path=False)],
        force=True,
    )


# ── CLI ───────────────────────────────────────────────────────────────────────

@click.group(name="nvcheckup", context_settings={"help_option_names": ["-h", "--help"]})
@click.version_option(__version__, "-V", "--version", prog_name="nvcheckup")
@click.option("--verbose", "-v", is_flag=True, default=False, help="Show debug logging on stderr.")
@click.option(
    "--config",
    "config_path",
    type=click.Path(dir_okay=False, path_type=Path),
    default=None,
    help="Config file (default: ~/.config/nvcheckup/config.toml).",
)
@click.pass_context
def cli(ctx: click.Context, verbose: bool, config_path: Optional[Path]) -> None:
    """GPU & driver diagnostics — safe, reversible fixes.

    \b
    Every applied fix is recorded in nvcheckup-changes.json so it can be
    reviewed and undone later with `nvcheckup undo`.
    """
    _configure_logging(verbose)
    ctx.obj = load_config(config_path)


# Shared by fix and undo
_out_option = click.option(
    "--out",
    "out_dir",
    type=click.Path(file_okay=False, path_type=Path),
    default=None,
    help="Directory for the change journal (default: config journal_dir, else cwd).",
)
_yes_option = click.option(
    "--yes", "-y", is_flag=True, default=False, help="Skip the confirmation prompt."
)


@cli.command()
@click.option("--id", "action_id", metavar="ACTION", default=None, help="Remediation action ID to apply.")
@click.option("--all", "show_all", is_flag=True, default=False, help="List every action with full details.")
@click.option(
    "--dry-run/--no-dry-run",
    default=None,
    help="Preview changes without applying (default from config).",
)
@_out_option
@_yes_option
@click.pass_obj
def fix(
    config: dict,
    action_id: Optional[str],
    show_all: bool,
    dry_run: Optional[bool],
    out_dir: Optional[Path],
    yes: bool,
) -> None:
    """List and apply safe remediation fixes."""
    engine = Engine(
        journal_dir=out_dir or config["journal_dir"],
        dry_run=config["dry_run"] if dry_run is None else dry_run,
    )

    from nvcheckup.fixer.runner import run_fix_session
    code = run_fix_session(engine, console, action_id=action_id, show_all=show_all, assume_yes=yes)
    if code:
        raise SystemExit(code)


@cli.command()
@click.option("--id", "action_id", metavar="ACTION", default=None, help="Action ID to undo.")
@click.option(
    "--dry-run/--no-dry-run",
    default=None,
    help="Check the entry without running the undo (default from config).",
)
@_out_option
@_yes_option
@click.pass_obj
def undo(
    config: dict,
    action_id: Optional[str],
    dry_run: Optional[bool],
    out_dir: Optional[Path],
    yes: bool,
) -> None:
    """List journaled changes, or reverse the latest one for an action."""
    engine = Engine(
        journal_dir=out_dir or config["journal_dir"],
        dry_run=config["dry_run"] if dry_run is None else dry_run,
    )

    from nvcheckup.fixer.runner import run_undo_session
    code = run_undo_session(engine, console, action_id=action_id, assume_yes=yes)
    if code:
        raise SystemExit(code)


# ── Entry ─────────────────────────────────────────────────────────────────────

if __name__ == "__main__":
    cli()

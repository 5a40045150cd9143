"""
Remediation engine — the only entry point callers use.

  preview(action)     — describe the change, no side effects
  apply(action)       — run it, journal the outcome (success or failure)
  undo(entry)         — reverse a journaled success, update that entry
  list_available()    — actions for this platform

Lifecycle of one application:
  pending ─apply→ applied(success) ─undo→ undone(success | failed)
                └→ applied(failed)   (terminal)

Dry-run mode never calls the executor and never touches the journal.
The engine enforces no risk policy; a "high" action is applied exactly
like a "low" one. Gating is the caller's job.
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Optional, Union

from nvcheckup.remediate.errors import (
    ActionFailedError,
    JournalEntryNotFoundError,
    JournalError,
    UndoPreconditionError,
)
from nvcheckup.remediate.journal import Journal
from nvcheckup.remediate.models import (
    ChangeJournalEntry,
    RemediationAction,
    RemediationResult,
    utc_now,
)
from nvcheckup.remediate.registry import ActionRegistry, detect_platform

logger = logging.getLogger(__name__)

UNDO_OK_OUTPUT = "successfully undone"


class Engine:
    """
    Args:
        platform:    Action registry for this OS (default: detect_platform()).
        journal_dir: Directory holding the change journal file.
        dry_run:     Simulate only — no commands, no journal writes.
    """

    def __init__(
        self,
        platform: Optional[ActionRegistry] = None,
        journal_dir: Union[str, Path] = ".",
        dry_run: bool = False,
    ) -> None:
        self.platform = platform if platform is not None else detect_platform()
        self.journal = Journal(journal_dir)
        self.dry_run = dry_run

    # ── Catalog ───────────────────────────────────────────────────────────────

    def list_available(self) -> list[RemediationAction]:
        """Actions for this platform. Empty is a valid answer, not an error."""
        return self.platform.list_actions()

    def get_action(self, action_id: str) -> Optional[RemediationAction]:
        return self.platform.get(action_id)

    # ── Preview ───────────────────────────────────────────────────────────────

    def preview(self, action: RemediationAction) -> str:
        """Human-readable summary shown before the user confirms. Pure."""
        lines = [
            f"Action: {action.title}",
            f"  {action.description}",
            f"  Risk level:    {action.risk}",
        ]
        if action.needs_admin:
            lines.append("  Requires:      elevated/admin privileges")
        if action.needs_reboot:
            lines.append("  Note:          a reboot is required after applying")
        if action.undo_description:
            lines.append(f"  Undo:          {action.undo_description}")
        if self.dry_run:
            lines.append("  Mode:          DRY RUN (no changes will be made)")
            if action.dry_run_description:
                lines.append(f"  {action.dry_run_description}")
        return "\n".join(lines) + "\n"

    # ── Apply ─────────────────────────────────────────────────────────────────

    def apply(self, action: RemediationAction) -> RemediationResult:
        """
        Apply one action and journal the outcome.

        A failed command is NOT raised — it comes back as success=False and
        is journaled like a success.

        Raises:
            UnknownActionError: the platform has no handler for action.id
                                (nothing ran, nothing journaled).
            JournalError:       the action ran but the journal write failed;
                                the result is on ``err.result``.
        """
        result = RemediationResult(
            action_id=action.id,
            success=False,
            timestamp=utc_now(),
            dry_run=self.dry_run,
        )

        if self.dry_run:
            result.success = True
            result.output = f"[DRY RUN] Would apply: {action.title}"
            logger.debug("dry-run apply %s", action.id)
            return result

        try:
            output, undo_info = self.platform.apply(action.id)
        except ActionFailedError as e:
            result.output = e.output
            result.error = str(e)
            logger.debug("apply %s failed: %s", action.id, e)
        else:
            result.success = True
            result.output = output
            result.undo_info = undo_info
            logger.debug("apply %s ok (undo_info=%r)", action.id, undo_info)

        entry = ChangeJournalEntry(
            action_id=action.id,
            title=action.title,
            applied_at=result.timestamp,
            success=result.success,
            output=result.output,
            undo_info=result.undo_info,
        )
        try:
            self.journal.append(entry)
        except JournalError as e:
            raise JournalError(
                f"action applied but journal write failed: {e}", result=result
            ) from e

        return result

    # ── Undo ──────────────────────────────────────────────────────────────────

    def undo(self, entry: ChangeJournalEntry) -> None:
        """
        Reverse a journaled change and record the undo on that same entry.

        The entry is located by exact (action_id, applied_at) match.

        Raises:
            UndoPreconditionError:     entry failed, has no undo info, or was
                                       already undone (nothing ran).
            UnknownActionError:        no undo handler for entry.action_id.
            ActionFailedError:         the undo command failed (journaled).
            JournalEntryNotFoundError: undo ran but no entry matched.
            JournalError:              undo ran but the journal update failed;
                                       the command's own failure, if any, is
                                       on ``err.undo_error``.
        """
        if not entry.success:
            raise UndoPreconditionError(
                f"cannot undo action {entry.action_id!r}: original action did not succeed"
            )
        if not entry.undo_info:
            raise UndoPreconditionError(
                f"no undo information available for action {entry.action_id!r}"
            )
        if entry.undone_at is not None:
            raise _already_undone(entry)

        # The caller's copy may be stale; the journal's copy decides.
        # An unreadable journal is reported once the command has run.
        try:
            recorded = _find_entry(self.journal.read(), entry)
        except JournalError as e:
            logger.debug("journal unreadable before undo %s: %s", entry.action_id, e)
            recorded = None
        if recorded is not None and recorded.undone_at is not None:
            raise _already_undone(recorded)

        if self.dry_run:
            logger.debug("dry-run undo %s", entry.action_id)
            return

        undo_error: Optional[ActionFailedError] = None
        try:
            self.platform.undo(entry.action_id, entry.undo_info)
        except ActionFailedError as e:
            undo_error = e
            logger.debug("undo %s failed: %s", entry.action_id, e)

        try:
            entries = self.journal.read()
        except JournalError as e:
            raise JournalError(
                f"undo executed but failed to update journal: {e}", undo_error=undo_error
            ) from e

        target = _find_entry(entries, entry)
        if target is None:
            logger.warning(
                "no journal entry for %s applied at %s", entry.action_id, entry.applied_at
            )
            raise JournalEntryNotFoundError(
                f"undo executed but no journal entry matches {entry.action_id!r} "
                f"applied at {entry.applied_at.isoformat()}",
                undo_error=undo_error,
            )

        target.undone_at = utc_now()
        target.undo_success = undo_error is None
        target.undo_output = str(undo_error) if undo_error else UNDO_OK_OUTPUT

        try:
            self.journal.write(entries)
        except JournalError as e:
            raise JournalError(
                f"undo executed but failed to update journal: {e}", undo_error=undo_error
            ) from e

        if undo_error is not None:
            raise undo_error


def _find_entry(
    entries: list[ChangeJournalEntry], entry: ChangeJournalEntry
) -> Optional[ChangeJournalEntry]:
    """Exact (action_id, applied_at) match, or None."""
    return next(
        (
            e for e in entries
            if e.action_id == entry.action_id and e.applied_at == entry.applied_at
        ),
        None,
    )


def _already_undone(entry: ChangeJournalEntry) -> UndoPreconditionError:
    return UndoPreconditionError(
        f"action {entry.action_id!r} was already undone at {entry.undone_at.isoformat()}"
    )

"""
Remediation failures, one class per kind.

  UnknownActionError    — configuration: the ID has no handler on this platform
  ActionFailedError     — execution: the system command failed
  UndoPreconditionError — precondition: the journal entry cannot be undone
  JournalError          — persistence: the change journal could not be read/written

Callers tell "it worked but wasn't recorded" (JournalError) apart from
"it failed" (ActionFailedError) by type alone.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Optional, Sequence

if TYPE_CHECKING:
    from nvcheckup.remediate.models import RemediationResult


class CommandError(Exception):
    """A command could not be started or exited non-zero."""

    def __init__(self, command: Sequence[str], returncode: int, output: str = "") -> None:
        self.command = tuple(command)
        self.returncode = returncode
        self.output = output
        detail = f": {output}" if output else ""
        super().__init__(f"{' '.join(self.command)} exited with {returncode}{detail}")


class RemediationError(Exception):
    """Base class for every error raised by the remediation engine."""


class UnknownActionError(RemediationError):
    def __init__(self, action_id: str, platform: str = "") -> None:
        self.action_id = action_id
        where = f" on {platform}" if platform else ""
        super().__init__(f"unknown remediation action{where}: {action_id!r}")


class ActionFailedError(RemediationError):
    """An apply or undo handler failed. ``output`` holds what the command printed."""

    def __init__(self, message: str, output: str = "") -> None:
        self.output = output
        super().__init__(message)


class UndoPreconditionError(RemediationError):
    pass


class JournalError(RemediationError):
    """
    The change journal could not be read, parsed or written.

    When raised from Engine.apply(), ``result`` is the RemediationResult of
    the action that already ran. When raised from Engine.undo(),
    ``undo_error`` is the undo command's own failure (None if it succeeded).
    """

    def __init__(
        self,
        message: str,
        result: Optional[RemediationResult] = None,
        undo_error: Optional[ActionFailedError] = None,
    ) -> None:
        self.result = result
        self.undo_error = undo_error
        super().__init__(message)


class JournalEntryNotFoundError(JournalError):
    """Undo ran, but no journal entry matched (action_id, applied_at) exactly."""

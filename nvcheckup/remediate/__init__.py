"""
Remediation subsystem for NVCheckup.

Modules:
  models.py   — RemediationAction, RemediationResult, ChangeJournalEntry.
  errors.py   — typed failures: configuration, execution, precondition, persistence.
  executor.py — command execution seam (real subprocess / recording test double).
  registry.py — platform capability: action catalog + apply/undo lookup table.
  windows.py  — Windows actions (power plan, HAGS, Game Mode).
  linux.py    — Linux actions (persistence mode, CPU governor).
  journal.py  — JSON change journal on disk.
  engine.py   — preview / apply / undo / list_available orchestrator.
"""

from nvcheckup.remediate.engine import Engine
from nvcheckup.remediate.errors import (
    ActionFailedError,
    CommandError,
    JournalEntryNotFoundError,
    JournalError,
    RemediationError,
    UndoPreconditionError,
    UnknownActionError,
)
from nvcheckup.remediate.executor import Executor, RecordingExecutor, SubprocessExecutor
from nvcheckup.remediate.journal import Journal
from nvcheckup.remediate.models import ChangeJournalEntry, RemediationAction, RemediationResult
from nvcheckup.remediate.registry import ActionRegistry, detect_platform

__all__ = [
    "ActionFailedError",
    "ActionRegistry",
    "ChangeJournalEntry",
    "CommandError",
    "Engine",
    "Executor",
    "Journal",
    "JournalEntryNotFoundError",
    "JournalError",
    "RecordingExecutor",
    "RemediationAction",
    "RemediationError",
    "RemediationResult",
    "SubprocessExecutor",
    "UndoPreconditionError",
    "UnknownActionError",
    "detect_platform",
]

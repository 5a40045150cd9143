"""
Core data model for NVCheckup remediation.

RemediationAction  — static descriptor of a reversible fix (never persisted).
RemediationResult  — outcome of one Engine.apply() call (in memory only).
ChangeJournalEntry — one persisted line of the change journal.

The journal file format is the JSON shape produced by
ChangeJournalEntry.to_dict(). Keep field names stable.
"""

from __future__ import annotations

import dataclasses
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Any, Literal, Optional


Risk = Literal["low", "medium", "high"]
Platform = Literal["windows", "linux", "all"]


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


# ── Descriptors ───────────────────────────────────────────────────────────────

@dataclass(frozen=True)
class RemediationAction:
    # Identity
    id: str                     # "set-high-performance"
    title: str                  # "Switch Power Plan to High Performance"
    risk: Risk
    description: str            # What the fix changes

    # Scope
    platform: Platform
    needs_admin: bool = False
    needs_reboot: bool = False
    category: str = ""          # "power", "registry", "driver"
    related_finding: str = ""   # Free text: "HAGS is enabled"

    # Preview text
    dry_run_description: str = ""   # "Would run: powercfg /setactive …"
    undo_description: str = ""      # "Restore the previous power plan."


# ── Results ───────────────────────────────────────────────────────────────────

@dataclass
class RemediationResult:
    action_id: str
    success: bool
    output: str = ""
    error: Optional[str] = None
    undo_info: str = ""         # Empty means "not undoable"
    timestamp: datetime = dataclasses.field(default_factory=utc_now)
    dry_run: bool = False


# ── Journal entry ─────────────────────────────────────────────────────────────

@dataclass
class ChangeJournalEntry:
    # Written once by Engine.apply()
    action_id: str
    title: str
    applied_at: datetime
    success: bool
    output: str = ""
    undo_info: str = ""

    # Written once by Engine.undo()
    undone_at: Optional[datetime] = None
    undo_success: bool = False
    undo_output: str = ""

    @property
    def status(self) -> str:
        """One-word state for listings: applied, FAILED, undone, undo FAILED."""
        if self.undone_at is not None:
            return "undone" if self.undo_success else "undo FAILED"
        return "applied" if self.success else "FAILED"

    @property
    def is_undoable(self) -> bool:
        return self.success and bool(self.undo_info) and self.undone_at is None

    def to_dict(self) -> dict[str, Any]:
        d = dataclasses.asdict(self)
        d["applied_at"] = self.applied_at.isoformat()
        d["undone_at"] = self.undone_at.isoformat() if self.undone_at else None
        return d

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> ChangeJournalEntry:
        """
        Build an entry from one element of the journal JSON array.

        Raises KeyError / ValueError / TypeError on a malformed element;
        Journal.read() turns those into a JournalError.
        """
        undone_at = data.get("undone_at")
        return cls(
            action_id=str(data["action_id"]),
            title=str(data.get("title", "")),
            applied_at=_parse_timestamp(data["applied_at"]),
            success=bool(data.get("success", False)),
            output=str(data.get("output", "")),
            undo_info=str(data.get("undo_info", "")),
            undone_at=_parse_timestamp(undone_at) if undone_at else None,
            undo_success=bool(data.get("undo_success", False)),
            undo_output=str(data.get("undo_output", "")),
        )


def _parse_timestamp(value: str) -> datetime:
    ts = datetime.fromisoformat(value)
    # Naive timestamps from hand-edited journals are taken as UTC
    if ts.tzinfo is None:
        ts = ts.replace(tzinfo=timezone.utc)
    return ts

"""
Change journal — every applied/undone remediation, on disk.

One JSON array in <dir>/nvcheckup-changes.json, indented for humans.
Entries are appended by Engine.apply() and only their undo fields are
ever updated (by Engine.undo()). Nothing is ever removed or reordered.

A missing or empty file means "no entries yet", never an error.
Single process only — there is no file locking.
"""

from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Optional, Union

from nvcheckup.remediate.errors import JournalError
from nvcheckup.remediate.models import ChangeJournalEntry

logger = logging.getLogger(__name__)


# ── Constants ────────────────────────────────────────────────────────────────

JOURNAL_FILENAME = "nvcheckup-changes.json"


# ── Journal ──────────────────────────────────────────────────────────────────

class Journal:
    def __init__(self, directory: Union[str, Path]) -> None:
        self._path = Path(directory) / JOURNAL_FILENAME

    @property
    def path(self) -> Path:
        return self._path

    def read(self) -> list[ChangeJournalEntry]:
        """
        Return all entries in file order.

        Raises JournalError if the file can't be read or isn't a valid
        entry array.
        """
        try:
            raw = self._path.read_text(encoding="utf-8")
        except FileNotFoundError:
            return []
        except OSError as e:
            raise JournalError(f"failed to read journal file {self._path}: {e}") from e

        if not raw.strip():
            return []

        try:
            data = json.loads(raw)
        except json.JSONDecodeError as e:
            raise JournalError(f"failed to parse journal file {self._path}: {e}") from e

        if not isinstance(data, list):
            raise JournalError(f"failed to parse journal file {self._path}: expected a JSON array")

        try:
            return [ChangeJournalEntry.from_dict(item) for item in data]
        except (KeyError, TypeError, ValueError, AttributeError) as e:
            raise JournalError(f"failed to parse journal file {self._path}: bad entry ({e})") from e

    def write(self, entries: list[ChangeJournalEntry]) -> None:
        """Replace the whole file, creating the parent directory if needed."""
        try:
            self._path.parent.mkdir(parents=True, exist_ok=True)
            payload = json.dumps([e.to_dict() for e in entries], indent=2)
            self._path.write_text(payload + "\n", encoding="utf-8")
        except OSError as e:
            logger.warning("journal write failed: %s", e)
            raise JournalError(f"failed to write journal file {self._path}: {e}") from e
        logger.debug("journal rewritten: %d entries → %s", len(entries), self._path)

    def append(self, entry: ChangeJournalEntry) -> None:
        entries = self.read()
        entries.append(entry)
        self.write(entries)

    def find_undoable(self, action_id: str) -> Optional[ChangeJournalEntry]:
        """Most recent entry for action_id that can still be undone, or None."""
        for entry in reversed(self.read()):
            if entry.action_id == action_id and entry.is_undoable:
                return entry
        return None

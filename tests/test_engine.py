"""
Tests for remediate/engine.py.

All engine tests run against RecordingExecutor (see conftest.FakeActions):
no real commands, every call inspectable.

Covers:
  - preview:        content, admin/reboot/dry-run lines, purity
  - apply:          dry run, live success, idempotent no-op, failures
                    journaled, unknown IDs, journal write failure
  - undo:           preconditions, dry run, exact-match mutation, failed
                    undo journaled, vanished entry, journal failures
  - list_available: delegation, empty platform
"""

from datetime import timedelta

import pytest

from nvcheckup.remediate.engine import UNDO_OK_OUTPUT, Engine
from nvcheckup.remediate.errors import (
    ActionFailedError,
    JournalEntryNotFoundError,
    JournalError,
    UndoPreconditionError,
    UnknownActionError,
)
from nvcheckup.remediate.executor import RecordingExecutor
from nvcheckup.remediate.journal import JOURNAL_FILENAME
from nvcheckup.remediate.models import ChangeJournalEntry, RemediationAction, utc_now
from nvcheckup.remediate.registry import UnsupportedActions


# ── Helpers ───────────────────────────────────────────────────────────────────

def _action(**kwargs) -> RemediationAction:
    defaults = dict(
        id="a",
        title="Set Thing",
        risk="low",
        description="Does a test thing",
        platform="all",
    )
    defaults.update(kwargs)
    return RemediationAction(**defaults)


def _entry(**kwargs) -> ChangeJournalEntry:
    defaults = dict(
        action_id="a",
        title="Set Thing",
        applied_at=utc_now(),
        success=True,
        undo_info="2",
    )
    defaults.update(kwargs)
    return ChangeJournalEntry(**defaults)


# ── Construction ──────────────────────────────────────────────────────────────

class TestConstruction:
    def test_defaults_to_detected_platform(self, tmp_path, monkeypatch):
        fake = UnsupportedActions(RecordingExecutor())
        monkeypatch.setattr("nvcheckup.remediate.engine.detect_platform", lambda: fake)
        engine = Engine(journal_dir=tmp_path)
        assert engine.platform is fake
        assert engine.dry_run is False

    def test_journal_lives_in_journal_dir(self, make_engine, tmp_path):
        engine, _ = make_engine()
        assert engine.journal.path == tmp_path / "journal" / JOURNAL_FILENAME


# ── Preview ───────────────────────────────────────────────────────────────────

class TestPreview:
    def test_contains_title_description_risk(self, make_engine):
        engine, _ = make_engine()
        text = engine.preview(_action(risk="medium"))
        assert "Set Thing" in text
        assert "Does a test thing" in text
        assert "medium" in text

    def test_admin_and_reboot_lines(self, make_engine):
        engine, _ = make_engine()
        text = engine.preview(_action(needs_admin=True, needs_reboot=True))
        assert "elevated" in text
        assert "reboot" in text

    def test_no_admin_or_reboot_lines_when_not_needed(self, make_engine):
        engine, _ = make_engine()
        text = engine.preview(_action())
        assert "elevated" not in text
        assert "reboot" not in text
        assert "DRY RUN" not in text

    def test_dry_run_marker(self, make_engine):
        engine, _ = make_engine(dry_run=True)
        text = engine.preview(_action(dry_run_description="Would run: set-thing 1"))
        assert "DRY RUN" in text
        assert "Would run: set-thing 1" in text

    def test_is_pure_and_deterministic(self, make_engine):
        engine, ex = make_engine()
        action = _action(needs_admin=True)
        assert engine.preview(action) == engine.preview(action)
        assert ex.calls == []
        assert not engine.journal.path.exists()

    def test_high_risk_previewed_like_any_other(self, make_engine):
        engine, _ = make_engine()
        assert "high" in engine.preview(_action(risk="high"))


# ── Apply ─────────────────────────────────────────────────────────────────────

class TestApplyDryRun:
    def test_scenario_dry_run(self, make_engine):
        engine, ex = make_engine(dry_run=True)
        action = _action(id="set-high-performance", title="Switch Power Plan")
        result = engine.apply(action)

        assert result.output.startswith("[DRY RUN] Would apply: Switch Power Plan")
        assert result.success is True
        assert result.dry_run is True
        assert result.undo_info == ""
        assert ex.call_count == 0
        assert engine.journal.read() == []

    def test_dry_run_never_dispatches_even_unknown_ids(self, make_engine):
        engine, ex = make_engine(dry_run=True)
        result = engine.apply(_action(id="not-registered"))
        assert result.success
        assert ex.calls == []


class TestApplyLive:
    def test_scenario_live_apply(self, make_engine, action_a):
        engine, ex = make_engine([("2", 0), ("", 0)])
        result = engine.apply(action_a)
        assert result.success is True
        assert result.undo_info == "2"
        assert result.dry_run is False
        assert result.error is None
        assert ex.calls == [("get-thing",), ("set-thing", "1")]

    def test_apply_then_read_journal(self, make_engine, action_a):
        engine, _ = make_engine([("2", 0), ("", 0)])
        result = engine.apply(action_a)

        entries = engine.journal.read()
        assert len(entries) == 1
        entry = entries[0]
        assert entry.action_id == action_a.id
        assert entry.title == action_a.title
        assert entry.success is True
        assert entry.undo_info == result.undo_info
        assert entry.applied_at == result.timestamp
        assert entry.undone_at is None

    def test_idempotent_when_already_at_target(self, make_engine, action_a):
        engine, ex = make_engine([("1", 0)])
        result = engine.apply(action_a)
        assert result.success is True
        assert "nothing to do" in result.output
        assert result.undo_info == "1"
        assert ex.call_count == 1

    def test_applying_twice_appends_two_entries(self, make_engine, action_a):
        engine, _ = make_engine([("2", 0), ("", 0), ("1", 0)])
        engine.apply(action_a)
        engine.apply(action_a)
        entries = engine.journal.read()
        assert len(entries) == 2
        assert [e.undo_info for e in entries] == ["2", "1"]

    def test_failure_is_journaled(self, make_engine, action_a):
        engine, _ = make_engine([("2", 0), ("access denied", 1)])
        result = engine.apply(action_a)

        assert result.success is False
        assert result.undo_info == ""
        assert "failed to set thing" in result.error
        assert result.output == "access denied"

        entries = engine.journal.read()
        assert len(entries) == 1
        assert entries[0].success is False
        assert entries[0].undo_info == ""
        assert entries[0].output == "access denied"

    def test_failed_query_is_journaled(self, make_engine, action_a):
        engine, ex = make_engine([("no such device", 1)])
        result = engine.apply(action_a)
        assert result.success is False
        assert ex.call_count == 1
        assert engine.journal.read()[0].success is False

    def test_unknown_action_raises_and_journals_nothing(self, make_engine):
        engine, ex = make_engine()
        with pytest.raises(UnknownActionError):
            engine.apply(_action(id="not-registered"))
        assert ex.calls == []
        assert not engine.journal.path.exists()

    def test_journal_write_failure_keeps_result(self, tmp_path, action_a):
        from conftest import FakeActions

        blocker = tmp_path / "blocker"
        blocker.write_text("")
        ex = RecordingExecutor([("2", 0), ("", 0)])
        engine = Engine(FakeActions(ex), blocker)

        with pytest.raises(JournalError) as exc:
            engine.apply(action_a)

        assert not isinstance(exc.value, ActionFailedError)
        assert "journal write failed" in str(exc.value)
        assert exc.value.result is not None
        assert exc.value.result.success is True
        assert exc.value.result.undo_info == "2"
        # The change itself happened
        assert ex.calls[-1] == ("set-thing", "1")


# ── Undo ──────────────────────────────────────────────────────────────────────

class TestUndoPreconditions:
    def test_scenario_undo_rejected_failed_original(self, make_engine):
        engine, ex = make_engine()
        with pytest.raises(UndoPreconditionError, match="did not succeed"):
            engine.undo(_entry(success=False, undo_info=""))
        assert ex.call_count == 0

    def test_failed_original_with_undo_info_rejected(self, make_engine):
        engine, ex = make_engine()
        with pytest.raises(UndoPreconditionError, match="did not succeed"):
            engine.undo(_entry(success=False, undo_info="2"))
        assert ex.call_count == 0

    def test_missing_undo_info_rejected(self, make_engine):
        engine, ex = make_engine()
        with pytest.raises(UndoPreconditionError, match="no undo information"):
            engine.undo(_entry(undo_info=""))
        assert ex.call_count == 0

    def test_already_undone_rejected(self, make_engine):
        engine, ex = make_engine()
        with pytest.raises(UndoPreconditionError, match="already undone"):
            engine.undo(_entry(undone_at=utc_now(), undo_success=True))
        assert ex.call_count == 0

    def test_stale_entry_cannot_be_undone_twice(self, make_engine):
        engine, ex = make_engine()
        entry = _entry()
        engine.journal.append(entry)
        engine.undo(entry)
        first = engine.journal.read()[0]

        # entry is the caller's pre-undo copy; the journal already says undone
        assert entry.undone_at is None
        with pytest.raises(UndoPreconditionError, match="already undone"):
            engine.undo(entry)

        assert ex.call_count == 1
        assert engine.journal.read()[0] == first

    def test_journal_copy_checked_in_dry_run(self, make_engine):
        engine, ex = make_engine(dry_run=True)
        entry = _entry()
        engine.journal.append(_entry(applied_at=entry.applied_at, undone_at=utc_now(),
                                     undo_success=True))
        with pytest.raises(UndoPreconditionError, match="already undone"):
            engine.undo(entry)
        assert ex.call_count == 0

    def test_preconditions_apply_in_dry_run(self, make_engine):
        engine, _ = make_engine(dry_run=True)
        with pytest.raises(UndoPreconditionError):
            engine.undo(_entry(undo_info=""))


class TestUndo:
    def test_scenario_undo(self, make_engine):
        engine, ex = make_engine()
        entry = _entry()
        engine.journal.append(entry)

        engine.undo(entry)

        assert ex.calls == [("set-thing", "2")]
        stored = engine.journal.read()[0]
        assert stored.undo_success is True
        assert stored.undo_output == UNDO_OK_OUTPUT == "successfully undone"
        assert stored.undone_at is not None
        assert stored.undone_at >= stored.applied_at
        assert stored.status == "undone"

    def test_dry_run_is_a_noop(self, make_engine):
        engine, ex = make_engine(dry_run=True)
        entry = _entry()
        engine.journal.append(entry)

        assert engine.undo(entry) is None
        assert ex.call_count == 0
        assert engine.journal.read()[0].undone_at is None

    def test_only_exact_timestamp_match_is_mutated(self, make_engine):
        engine, _ = make_engine()
        t1 = utc_now()
        first = _entry(applied_at=t1, undo_info="2")
        second = _entry(applied_at=t1 + timedelta(microseconds=1), undo_info="3")
        engine.journal.write([first, second])

        engine.undo(first)

        stored = engine.journal.read()
        assert stored[0].undone_at is not None
        assert stored[1].undone_at is None
        assert stored[1].undo_output == ""

    def test_other_fields_untouched(self, make_engine):
        engine, _ = make_engine()
        entry = _entry(output="Set thing to 1 (was: 2)")
        engine.journal.append(entry)
        engine.undo(entry)
        stored = engine.journal.read()[0]
        assert (stored.action_id, stored.title, stored.applied_at, stored.success,
                stored.output, stored.undo_info) == (
                entry.action_id, entry.title, entry.applied_at, entry.success,
                entry.output, entry.undo_info)

    def test_failed_undo_is_journaled_and_raised(self, make_engine):
        engine, _ = make_engine([("permission denied", 1)])
        entry = _entry()
        engine.journal.append(entry)

        with pytest.raises(ActionFailedError, match="failed to restore thing"):
            engine.undo(entry)

        stored = engine.journal.read()[0]
        assert stored.undone_at is not None
        assert stored.undo_success is False
        assert "failed to restore thing" in stored.undo_output
        assert stored.status == "undo FAILED"

    def test_unknown_action_raises_before_journal(self, make_engine):
        engine, ex = make_engine()
        entry = _entry(action_id="not-registered")
        engine.journal.append(entry)

        with pytest.raises(UnknownActionError):
            engine.undo(entry)

        assert ex.calls == []
        assert engine.journal.read()[0].undone_at is None

    def test_vanished_entry_raises_distinct_error(self, make_engine):
        engine, ex = make_engine()
        engine.journal.append(_entry(applied_at=utc_now() - timedelta(days=1)))
        orphan = _entry()

        with pytest.raises(JournalEntryNotFoundError) as exc:
            engine.undo(orphan)

        assert exc.value.undo_error is None
        assert ex.calls == [("set-thing", "2")]
        assert engine.journal.read()[0].undone_at is None

    def test_corrupt_journal_reported_after_command_ran(self, make_engine):
        engine, ex = make_engine()
        engine.journal.path.parent.mkdir(parents=True)
        engine.journal.path.write_text("not json")

        with pytest.raises(JournalError, match="undo executed but failed to update journal"):
            engine.undo(_entry())

        assert ex.call_count == 1

    def test_journal_error_carries_undo_failure(self, make_engine):
        engine, _ = make_engine([("denied", 1)])
        engine.journal.path.parent.mkdir(parents=True)
        engine.journal.path.write_text("not json")

        with pytest.raises(JournalError) as exc:
            engine.undo(_entry())

        assert isinstance(exc.value.undo_error, ActionFailedError)


# ── Round trip ────────────────────────────────────────────────────────────────

def test_apply_then_undo_restores_baseline(make_engine, action_a):
    engine, ex = make_engine([("2", 0), ("", 0), ("", 0)])
    engine.apply(action_a)
    engine.undo(engine.journal.find_undoable("a"))

    assert ex.calls == [("get-thing",), ("set-thing", "1"), ("set-thing", "2")]
    assert engine.journal.find_undoable("a") is None
    assert engine.journal.read()[0].status == "undone"


# ── list_available ────────────────────────────────────────────────────────────

class TestListAvailable:
    def test_delegates_to_platform(self, make_engine, action_a):
        engine, _ = make_engine()
        assert engine.list_available() == [action_a]
        assert engine.get_action("a") == action_a

    def test_unsupported_platform_is_empty(self, tmp_path):
        engine = Engine(UnsupportedActions(RecordingExecutor()), tmp_path)
        assert engine.list_available() == []
        assert engine.get_action("set-high-performance") is None

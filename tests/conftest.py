"""
Shared pytest fixtures.

FakeActions is a one-action registry ("a": move a scalar "thing" to "1")
so engine tests run against RecordingExecutor with no real commands.
"""
import pytest

from nvcheckup.remediate.engine import Engine
from nvcheckup.remediate.executor import RecordingExecutor
from nvcheckup.remediate.models import RemediationAction
from nvcheckup.remediate.registry import (
    ActionHandler,
    ActionRegistry,
    apply_setting,
    restore_setting,
)


def _write_thing(value: str) -> list[str]:
    return ["set-thing", value]


def _apply_thing(executor) -> tuple[str, str]:
    return apply_setting(
        executor,
        label="thing",
        query=["get-thing"],
        parse=str.strip,
        target="1",
        write=_write_thing,
    )


def _undo_thing(executor, undo_info: str) -> None:
    restore_setting(executor, label="thing", undo_info=undo_info, write=_write_thing)


class FakeActions(ActionRegistry):
    platform = "test"
    catalog = (
        RemediationAction(
            id="a",
            title="Set Thing",
            risk="low",
            description="Sets the thing to 1.",
            platform="all",
        ),
    )
    handlers = {"a": ActionHandler(_apply_thing, _undo_thing)}


@pytest.fixture
def make_engine(tmp_path):
    """
    Factory: make_engine(responses, dry_run=False) → (engine, executor).

    The journal lives in tmp_path / "journal" (not created up front).
    """
    def _make(responses=None, dry_run: bool = False, registry_cls=FakeActions):
        executor = RecordingExecutor(responses)
        engine = Engine(registry_cls(executor), tmp_path / "journal", dry_run=dry_run)
        return engine, executor

    return _make


@pytest.fixture
def action_a() -> RemediationAction:
    return FakeActions.catalog[0]

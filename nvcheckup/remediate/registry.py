"""
Platform capability — the action catalog plus its apply/undo lookup table.

One ActionRegistry subclass per OS, picked at runtime by detect_platform()
and handed to the Engine. Dispatch is a dict lookup keyed by action ID;
an ID with no handler raises UnknownActionError before any command runs.

Every "scalar setting" handler follows the same shape (see apply_setting):
  1. read the current value (read-only command)
  2. parse it into a baseline — that baseline becomes undo_info
  3. already at target → no-op, still returns the baseline
  4. otherwise run the mutating command
  5. mutation failed → ActionFailedError, nothing to undo
  6. success → summary + baseline
"""

from __future__ import annotations

import logging
import sys
from typing import Callable, ClassVar, Mapping, NamedTuple, Optional, Sequence

from nvcheckup.remediate.errors import ActionFailedError, CommandError, UnknownActionError
from nvcheckup.remediate.executor import Executor, SubprocessExecutor
from nvcheckup.remediate.models import RemediationAction

logger = logging.getLogger(__name__)


class ActionHandler(NamedTuple):
    apply: Callable[[Executor], tuple[str, str]]    # → (output, undo_info)
    undo: Callable[[Executor, str], None]           # (executor, undo_info)


# ── Registry base ─────────────────────────────────────────────────────────────

class ActionRegistry:
    """
    Static catalog + handlers for one platform.

    Subclasses set ``platform``, ``catalog`` and ``handlers`` as class
    attributes. The base class with nothing set is a valid, empty registry.
    """

    platform: ClassVar[str] = "unsupported"
    catalog: ClassVar[tuple[RemediationAction, ...]] = ()
    handlers: ClassVar[Mapping[str, ActionHandler]] = {}

    def __init__(self, executor: Optional[Executor] = None) -> None:
        self.executor: Executor = executor or SubprocessExecutor()

    def list_actions(self) -> list[RemediationAction]:
        return list(self.catalog)

    def get(self, action_id: str) -> Optional[RemediationAction]:
        """Return the descriptor for action_id, or None."""
        for action in self.catalog:
            if action.id == action_id:
                return action
        return None

    def apply(self, action_id: str) -> tuple[str, str]:
        """
        Run the apply handler for action_id.

        Returns (output, undo_info). Raises UnknownActionError for an ID
        this platform doesn't know, ActionFailedError when the change failed.
        """
        handler = self._handler(action_id)
        logger.debug("apply %s on %s", action_id, self.platform)
        try:
            return handler.apply(self.executor)
        except CommandError as e:
            raise ActionFailedError(f"{action_id}: {e}", e.output) from e

    def undo(self, action_id: str, undo_info: str) -> None:
        """Restore the baseline captured by apply(). Raises like apply()."""
        handler = self._handler(action_id)
        logger.debug("undo %s on %s (restore %r)", action_id, self.platform, undo_info)
        try:
            handler.undo(self.executor, undo_info)
        except CommandError as e:
            raise ActionFailedError(f"{action_id}: {e}", e.output) from e

    def _handler(self, action_id: str) -> ActionHandler:
        handler = self.handlers.get(action_id)
        if handler is None:
            raise UnknownActionError(action_id, self.platform)
        return handler


class UnsupportedActions(ActionRegistry):
    """No remediation on this OS — empty catalog, every ID is unknown."""


# ── Runtime platform probe ────────────────────────────────────────────────────

def detect_platform(
    executor: Optional[Executor] = None,
    system: Optional[str] = None,
) -> ActionRegistry:
    """
    Return the action registry for the running OS.

    Args:
        executor: Command executor for the handlers (default: real subprocess).
        system:   Override for sys.platform, e.g. "win32" or "linux".
    """
    system = system or sys.platform

    if system == "win32":
        from nvcheckup.remediate.windows import WindowsActions
        registry: ActionRegistry = WindowsActions(executor)
    elif system.startswith("linux"):
        from nvcheckup.remediate.linux import LinuxActions
        registry = LinuxActions(executor)
    else:
        registry = UnsupportedActions(executor)

    logger.debug("platform %r → %s registry", system, registry.platform)
    return registry


# ── Shared handler shape ──────────────────────────────────────────────────────

def apply_setting(
    executor: Executor,
    *,
    label: str,
    query: Sequence[str],
    parse: Callable[[str], str],
    target: str,
    write: Callable[[str], Sequence[str]],
    default: Optional[str] = None,
    same: Callable[[str, str], bool] = str.__eq__,
) -> tuple[str, str]:
    """
    Move one scalar setting to ``target``, returning (output, baseline).

    Args:
        label:   Human name of the setting, used in messages.
        query:   Read-only command that prints the current value.
        parse:   Extracts the value from the query output ("" if not found).
        target:  Desired value.
        write:   Builds the mutating command for a given value.
        default: Baseline to assume when the query fails or can't be parsed
                 (e.g. a registry value that doesn't exist yet). None means
                 an unreadable current value is a failure.
        same:    Equality used for the idempotent short-circuit.
    """
    try:
        current_output = executor.run(*query)
    except CommandError as e:
        if default is None:
            raise ActionFailedError(f"failed to read {label}: {e}", e.output) from e
        current_output = ""

    baseline = parse(current_output) or (default or "")
    if not baseline:
        raise ActionFailedError(
            f"could not parse {label} from output: {current_output}", current_output
        )

    if same(baseline, target):
        return f"{label} is already {target}; nothing to do", baseline

    try:
        executor.run(*write(target))
    except CommandError as e:
        raise ActionFailedError(f"failed to set {label} to {target}: {e}", e.output) from e

    return f"Set {label} to {target} (was: {baseline})", baseline


def restore_setting(
    executor: Executor,
    *,
    label: str,
    undo_info: str,
    write: Callable[[str], Sequence[str]],
) -> None:
    """Write the stored baseline back."""
    try:
        executor.run(*write(undo_info))
    except CommandError as e:
        raise ActionFailedError(f"failed to restore {label} to {undo_info}: {e}", e.output) from e

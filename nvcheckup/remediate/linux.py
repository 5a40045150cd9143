"""
Linux remediation actions.

  enable-persistence-mode      — nvidia-smi -pm 1 (keep the driver loaded)
  set-cpu-governor-performance — cpupower frequency-set -g performance

undo_info is "0"/"1" for persistence mode and the previous governor
name (e.g. "powersave") for the CPU governor.
"""

from __future__ import annotations

from nvcheckup.remediate.executor import Executor
from nvcheckup.remediate.models import RemediationAction
from nvcheckup.remediate.registry import (
    ActionHandler,
    ActionRegistry,
    apply_setting,
    restore_setting,
)


_GOVERNOR_PATH = "/sys/devices/system/cpu/cpu0/cpufreq/scaling_governor"

_PERSISTENCE_FLAGS = {"enabled": "1", "disabled": "0"}


def parse_persistence_mode(output: str) -> str:
    """
    Map `nvidia-smi --query-gpu=persistence_mode --format=csv,noheader`
    to "1"/"0". Multi-GPU output has one line per GPU; GPU 0 decides.
    """
    lines = output.strip().splitlines()
    if not lines:
        return ""
    return _PERSISTENCE_FLAGS.get(lines[0].strip().lower(), "")


def parse_governor(output: str) -> str:
    fields = output.split()
    return fields[0] if fields else ""


# ── Persistence mode ──────────────────────────────────────────────────────────

def _set_persistence(flag: str) -> list[str]:
    return ["nvidia-smi", "-pm", flag]


def _apply_persistence(executor: Executor) -> tuple[str, str]:
    return apply_setting(
        executor,
        label="NVIDIA persistence mode",
        query=["nvidia-smi", "--query-gpu=persistence_mode", "--format=csv,noheader"],
        parse=parse_persistence_mode,
        target="1",
        write=_set_persistence,
    )


def _undo_persistence(executor: Executor, undo_info: str) -> None:
    restore_setting(
        executor, label="NVIDIA persistence mode", undo_info=undo_info, write=_set_persistence
    )


# ── CPU governor ──────────────────────────────────────────────────────────────

def _set_governor(governor: str) -> list[str]:
    return ["cpupower", "frequency-set", "-g", governor]


def _apply_governor(executor: Executor) -> tuple[str, str]:
    return apply_setting(
        executor,
        label="CPU frequency governor",
        query=["cat", _GOVERNOR_PATH],
        parse=parse_governor,
        target="performance",
        write=_set_governor,
    )


def _undo_governor(executor: Executor, undo_info: str) -> None:
    restore_setting(executor, label="CPU frequency governor", undo_info=undo_info, write=_set_governor)


# ── Registry ──────────────────────────────────────────────────────────────────

class LinuxActions(ActionRegistry):
    platform = "linux"

    catalog = (
        RemediationAction(
            id="enable-persistence-mode",
            title="Enable NVIDIA Persistence Mode",
            risk="low",
            description=(
                "Runs nvidia-smi -pm 1 so the driver stays initialised between CUDA "
                "jobs. Avoids slow first launches and missing /dev/nvidia* nodes."
            ),
            platform="linux",
            needs_admin=True,
            category="driver",
            related_finding="No /dev/nvidia* Device Nodes Found",
            dry_run_description="Would run: nvidia-smi -pm 1",
            undo_description="Restore the previous persistence mode setting.",
        ),
        RemediationAction(
            id="set-cpu-governor-performance",
            title="Set CPU Frequency Governor to Performance",
            risk="low",
            description=(
                "Runs cpupower frequency-set -g performance. Power-saving governors "
                "can starve the GPU of CPU time in games and data loaders."
            ),
            platform="linux",
            needs_admin=True,
            category="power",
            related_finding="CPU governor is not set to performance",
            dry_run_description="Would run: cpupower frequency-set -g performance",
            undo_description="Restore the previous CPU frequency governor.",
        ),
    )

    handlers = {
        "enable-persistence-mode": ActionHandler(_apply_persistence, _undo_persistence),
        "set-cpu-governor-performance": ActionHandler(_apply_governor, _undo_governor),
    }

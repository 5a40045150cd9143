"""
Windows remediation actions.

  set-high-performance — powercfg power plan → High performance
  disable-hags         — HwSchMode registry value → 1 (HAGS off)
  disable-game-mode    — AutoGameModeEnabled registry value → 0

undo_info is the previous power plan GUID or the previous DWORD value
(decimal), exactly as captured before the change.
"""

from __future__ import annotations

import re
from functools import partial

from nvcheckup.remediate.executor import Executor
from nvcheckup.remediate.models import RemediationAction
from nvcheckup.remediate.registry import (
    ActionHandler,
    ActionRegistry,
    apply_setting,
    restore_setting,
)


# Well-known Microsoft power scheme GUID
HIGH_PERFORMANCE_GUID = "8c5e7fda-e8bf-4a96-9a85-a6e23a8c635c"

_GRAPHICS_DRIVERS_KEY = r"HKLM\SYSTEM\CurrentControlSet\Control\GraphicsDrivers"
_GAME_BAR_KEY = r"HKCU\Software\Microsoft\GameBar"

_GUID_RE = re.compile(r"GUID:\s*(\S+)")


# ── Output parsers ────────────────────────────────────────────────────────────

def parse_power_scheme_guid(output: str) -> str:
    """
    Extract the GUID from `powercfg /getactivescheme`.

        Power Scheme GUID: 381b4222-f694-41f0-9685-ff5bb260df2e  (Balanced)
    """
    m = _GUID_RE.search(output)
    return m.group(1) if m else ""


def parse_reg_dword(output: str, value_name: str) -> str:
    """
    Extract a DWORD from `reg query … /v <name>` as a decimal string.

        HwSchMode    REG_DWORD    0x2      →  "2"
    """
    for line in output.splitlines():
        fields = line.split()
        if len(fields) >= 3 and fields[0] == value_name and fields[1] == "REG_DWORD":
            try:
                return str(int(fields[-1], 16))
            except ValueError:
                return ""
    return ""


# ── Power plan ────────────────────────────────────────────────────────────────

def _set_active_scheme(guid: str) -> list[str]:
    return ["powercfg", "/setactive", guid]


def _apply_high_performance(executor: Executor) -> tuple[str, str]:
    return apply_setting(
        executor,
        label="power plan",
        query=["powercfg", "/getactivescheme"],
        parse=parse_power_scheme_guid,
        target=HIGH_PERFORMANCE_GUID,
        write=_set_active_scheme,
        same=lambda a, b: a.lower() == b.lower(),
    )


def _undo_high_performance(executor: Executor, undo_info: str) -> None:
    restore_setting(executor, label="power plan", undo_info=undo_info, write=_set_active_scheme)


# ── Registry DWORDs ───────────────────────────────────────────────────────────

def _reg_add(key: str, value_name: str, data: str) -> list[str]:
    return ["reg", "add", key, "/v", value_name, "/t", "REG_DWORD", "/d", data, "/f"]


def _dword_handler(key: str, value_name: str, target: str, default: str) -> ActionHandler:
    """Handler pair for one DWORD; ``default`` is the baseline when the value is absent."""
    label = f"{key}\\{value_name}"
    write = partial(_reg_add, key, value_name)

    def apply(executor: Executor) -> tuple[str, str]:
        return apply_setting(
            executor,
            label=label,
            query=["reg", "query", key, "/v", value_name],
            parse=lambda out: parse_reg_dword(out, value_name),
            target=target,
            write=write,
            default=default,
        )

    def undo(executor: Executor, undo_info: str) -> None:
        restore_setting(executor, label=label, undo_info=undo_info, write=write)

    return ActionHandler(apply, undo)


# ── Registry ──────────────────────────────────────────────────────────────────

class WindowsActions(ActionRegistry):
    platform = "windows"

    catalog = (
        RemediationAction(
            id="set-high-performance",
            title="Switch Power Plan to High Performance",
            risk="low",
            description=(
                "Sets the Windows power plan to 'High performance' using powercfg. "
                "This prevents CPU throttling and keeps the GPU at full clocks."
            ),
            platform="windows",
            needs_admin=True,
            category="power",
            related_finding="Power plan is not set to High performance",
            dry_run_description=f"Would run: powercfg /setactive {HIGH_PERFORMANCE_GUID}",
            undo_description="Restore the previous power plan.",
        ),
        RemediationAction(
            id="disable-hags",
            title="Disable Hardware-Accelerated GPU Scheduling (HAGS)",
            risk="medium",
            description=(
                "Sets the HwSchMode registry value to 1 to disable HAGS. Some games "
                "and applications stutter or crash with HAGS enabled."
            ),
            platform="windows",
            needs_admin=True,
            needs_reboot=True,
            category="registry",
            related_finding="HAGS is enabled",
            dry_run_description="Would set registry HwSchMode to 1 (Disabled).",
            undo_description="Restore the previous HwSchMode value. Requires reboot.",
        ),
        RemediationAction(
            id="disable-game-mode",
            title="Disable Windows Game Mode",
            risk="low",
            description=(
                "Sets the AutoGameModeEnabled registry value to 0 to disable Game Mode. "
                "Game Mode can cause frame pacing issues in some titles."
            ),
            platform="windows",
            category="registry",
            related_finding="Game Mode is enabled",
            dry_run_description="Would set registry AutoGameModeEnabled to 0.",
            undo_description="Restore the previous AutoGameModeEnabled value.",
        ),
    )

    handlers = {
        "set-high-performance": ActionHandler(_apply_high_performance, _undo_high_performance),
        "disable-hags": _dword_handler(_GRAPHICS_DRIVERS_KEY, "HwSchMode", target="1", default="2"),
        "disable-game-mode": _dword_handler(_GAME_BAR_KEY, "AutoGameModeEnabled", target="0", default="1"),
    }

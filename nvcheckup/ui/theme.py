"""
NVCheckup visual design system.

All colors, styles, and icons as named constants.
Import from here — never hardcode markup strings in other modules.
"""

from rich.style import Style
from rich.theme import Theme


# ── Color palette ─────────────────────────────────────────────────────────────
# Mid-tone hex values, readable on both dark and light terminal backgrounds.

COLOR_CRITICAL = "#D03F3F"      # Severity red
COLOR_WARNING  = "#C27C0E"      # Amber
COLOR_PASS     = "#3FA866"      # Green
COLOR_INFO     = "#3C8DBC"      # Slate blue
COLOR_BRAND    = "#76B900"      # NVIDIA green
COLOR_DIM      = "#808080"      # Medium gray
COLOR_COMMAND  = "#A8A8A8"      # Silver: commands stand out from dim text
COLOR_TEXT     = "default"      # Terminal's own foreground


# ── Rich styles ───────────────────────────────────────────────────────────────

STYLE_CRITICAL = Style(color=COLOR_CRITICAL, bold=True)
STYLE_WARNING  = Style(color=COLOR_WARNING,  bold=True)
STYLE_PASS     = Style(color=COLOR_PASS,     bold=True)
STYLE_DIM      = Style(color=COLOR_DIM)


# ── Risk levels ───────────────────────────────────────────────────────────────

RISK_STYLES: dict[str, Style] = {
    "low": STYLE_PASS,
    "medium": STYLE_WARNING,
    "high": STYLE_CRITICAL,
}

RISK_BORDERS: dict[str, str] = {
    "low": "cyan",
    "medium": "yellow",
    "high": "bright_red",
}


# ── Journal status icons ──────────────────────────────────────────────────────

ICON_LOCK = "🔐"
ICON_REBOOT = "🔄"

JOURNAL_STATUS_ICONS: dict[str, str] = {
    "applied": "✅",
    "FAILED": "❌",
    "undone": "↩️ ",
    "undo FAILED": "⚠️ ",
}

JOURNAL_STATUS_STYLES: dict[str, Style] = {
    "applied": STYLE_PASS,
    "FAILED": STYLE_CRITICAL,
    "undone": STYLE_DIM,
    "undo FAILED": STYLE_WARNING,
}


# ── Rich Theme ────────────────────────────────────────────────────────────────

NVCHECKUP_THEME = Theme(
    {
        "critical": f"{COLOR_CRITICAL} bold",
        "warning":  f"{COLOR_WARNING} bold",
        "pass":     f"{COLOR_PASS} bold",
        "info":     COLOR_INFO,
        "brand":    f"{COLOR_BRAND} bold",
        "dim":      COLOR_DIM,
        "command":  COLOR_COMMAND,
        "text":     COLOR_TEXT,
    }
)

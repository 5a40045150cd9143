"""
Command execution seam.

Every system command a remediation runs goes through an Executor, so
handlers can be exercised with zero real side effects.

  SubprocessExecutor — runs the real process (production)
  RecordingExecutor  — records calls, replays canned output (tests, simulations)

Contract for run(command, *args):
  - synchronous, one invocation, no retry, no timeout
  - returns stdout+stderr combined and stripped
  - raises CommandError if the process can't start or exits non-zero
"""

from __future__ import annotations

import logging
import os
import subprocess
from typing import Iterable, Optional, Protocol

from nvcheckup.remediate.errors import CommandError

logger = logging.getLogger(__name__)


class Executor(Protocol):
    def run(self, command: str, *args: str) -> str: ...


# ── Real execution ────────────────────────────────────────────────────────────

class SubprocessExecutor:
    """Run commands with subprocess, stderr merged into stdout."""

    def run(self, command: str, *args: str) -> str:
        cmd = [command, *args]
        # Force C locale so tool output is parseable regardless of system language
        env = {**os.environ, "LANG": "C", "LC_ALL": "C"}
        logger.debug("exec: %s", " ".join(cmd))
        try:
            proc = subprocess.run(
                cmd,
                stdout=subprocess.PIPE,
                stderr=subprocess.STDOUT,
                text=True,
                check=False,
                env=env,
            )
        except FileNotFoundError as e:
            raise CommandError(cmd, -1, f"Command not found: {command}") from e
        except OSError as e:
            raise CommandError(cmd, -1, str(e)) from e

        output = (proc.stdout or "").strip()
        if proc.returncode != 0:
            logger.debug("exec failed (%d): %s", proc.returncode, output)
            raise CommandError(cmd, proc.returncode, output)
        return output


# ── Test double ───────────────────────────────────────────────────────────────

class RecordingExecutor:
    """
    Record every call and replay pre-programmed responses in order.

    Args:
        responses: (output, returncode) pairs, consumed one per call.
                   A non-zero returncode makes that call raise CommandError.
        default:   Response used once ``responses`` is exhausted.

    Example:
        ex = RecordingExecutor([("2", 0), ("", 0)])
        ex.run("reg", "query", ...)   # → "2"
        ex.calls                      # → [("reg", "query", ...)]
    """

    def __init__(
        self,
        responses: Optional[Iterable[tuple[str, int]]] = None,
        default: tuple[str, int] = ("", 0),
    ) -> None:
        self._responses = list(responses or [])
        self._default = default
        self.calls: list[tuple[str, ...]] = []

    def run(self, command: str, *args: str) -> str:
        cmd = (command, *args)
        self.calls.append(cmd)
        output, returncode = self._responses.pop(0) if self._responses else self._default
        if returncode != 0:
            raise CommandError(cmd, returncode, output)
        return output

    @property
    def call_count(self) -> int:
        return len(self.calls)

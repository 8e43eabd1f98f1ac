from __future__ import annotations

import logging
import subprocess
from typing import Protocol

logger = logging.getLogger(__name__)


class CommandError(RuntimeError):
    """An external command could not be run or exited non-zero."""


class ProcessRunner(Protocol):
    def run(self, name: str, *args: str) -> str: ...


class CommandRunner:
    """Runs external commands (``uname``, ``ip``, ``timedatectl``)."""

    def __init__(self, timeout: float = 5.0) -> None:
        self.timeout = timeout

    def run(self, name: str, *args: str) -> str:
        try:
            result = subprocess.run(
                [name, *args],
                capture_output=True,
                text=True,
                timeout=self.timeout,
                check=True,
            )
        except (OSError, subprocess.SubprocessError) as exc:
            logger.debug("Command %s %s failed: %s", name, " ".join(args), exc)
            raise CommandError(f"{name} failed: {exc}") from exc
        return result.stdout.strip()

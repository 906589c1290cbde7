"""Byte progress bar for hashing.

ByteProgress implements the orchestrator's ProgressSink with a rich progress
bar on stderr. It stays silent in quiet mode and when not attached to an
interactive terminal (CI, pipes, TERM=dumb).
"""

from __future__ import annotations

import os
import sys
from typing import Any, Optional

from rich.console import Console
from rich.progress import (
    BarColumn,
    DownloadColumn,
    Progress,
    TextColumn,
    TimeRemainingColumn,
    TransferSpeedColumn,
)

from sfvforge.cli.console import get_err_console


def is_interactive() -> bool:
    """Check if we're running in an interactive terminal.

    Detection includes:
    - CI environment variables (CI, GITHUB_ACTIONS, JENKINS, etc.)
    - Non-TTY stderr
    - TERM=dumb
    """
    ci_vars = ["CI", "GITHUB_ACTIONS", "JENKINS_URL", "TRAVIS", "CIRCLECI", "GITLAB_CI"]
    if any(os.environ.get(var) for var in ci_vars):
        return False

    if os.environ.get("TERM") == "dumb":
        return False

    if not hasattr(sys.stderr, "isatty") or not sys.stderr.isatty():
        return False

    return True


class ByteProgress:
    """Rich progress bar counting hashed bytes.

    Example:
        progress = ByteProgress("Verifying")
        orchestrator = ChecksumOrchestrator(progress=progress)
        orchestrator.verify(Path("release.sfv"))
    """

    def __init__(
        self,
        description: str = "Hashing",
        quiet: bool = False,
        console: Optional[Console] = None,
    ) -> None:
        self.description = description
        self.enabled = not quiet and is_interactive()
        self.console = console or get_err_console()
        self.total = 0
        self.completed = 0
        self._progress: Optional[Progress] = None
        self._task_id: Optional[Any] = None

    def start(self, total: int) -> None:
        self.total = total
        self.completed = 0
        if not self.enabled:
            return

        self._progress = Progress(
            TextColumn("[progress.description]{task.description}"),
            BarColumn(complete_style="green", finished_style="green"),
            DownloadColumn(),
            TransferSpeedColumn(),
            TimeRemainingColumn(),
            console=self.console,
            transient=True,
        )
        self._progress.start()
        self._task_id = self._progress.add_task(
            f"[bold]{self.description}[/bold]", total=total
        )

    def update(self, advance: int) -> None:
        self.completed += advance
        if self._progress is not None and self._task_id is not None:
            self._progress.update(self._task_id, advance=advance)

    def finish(self) -> None:
        if self._progress is not None:
            self._progress.stop()
            self._progress = None
            self._task_id = None

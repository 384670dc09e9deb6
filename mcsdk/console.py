from __future__ import annotations

import logging
from typing import Protocol

from rich.console import Console
from rich.logging import RichHandler
from rich.markup import escape
from rich.progress import (
    BarColumn,
    DownloadColumn,
    Progress,
    TaskID,
    TimeRemainingColumn,
    TransferSpeedColumn,
)


class MessageSink(Protocol):
    def info(self, message: str) -> None: ...

    def warn(self, message: str) -> None: ...

    def error(self, message: str) -> None: ...


class ProgressSink(Protocol):
    def report(self, current: int, total: int) -> None: ...

    def finish(self) -> None: ...


class NullMessages:
    def info(self, message: str) -> None:
        pass

    def warn(self, message: str) -> None:
        pass

    def error(self, message: str) -> None:
        pass


class NullProgress:
    def report(self, current: int, total: int) -> None:
        pass

    def finish(self) -> None:
        pass


class RichMessages:
    """Operator-facing status lines: info on stdout, problems on stderr."""

    def __init__(
        self, console: Console | None = None, error_console: Console | None = None
    ) -> None:
        self.console = console or Console()
        self.error_console = error_console or Console(stderr=True)

    def info(self, message: str) -> None:
        self.console.print(f"[bold green]INFO[/] {escape(message)}")

    def warn(self, message: str) -> None:
        self.error_console.print(f"[bold yellow]WARN[/] {escape(message)}")

    def error(self, message: str) -> None:
        self.error_console.print(f"[bold red]ERROR[/] {escape(message)}")


class RichProgress:
    """Download meter; a total of 0 renders as an open-ended bar."""

    def __init__(self, console: Console | None = None, description: str = "server.jar") -> None:
        self.console = console or Console(stderr=True)
        self.description = description
        self._progress: Progress | None = None
        self._task: TaskID | None = None

    def report(self, current: int, total: int) -> None:
        if self._progress is None:
            self._progress = Progress(
                BarColumn(bar_width=40, complete_style="green"),
                DownloadColumn(),
                TransferSpeedColumn(),
                TimeRemainingColumn(),
                console=self.console,
            )
            self._progress.start()
            self._task = self._progress.add_task(self.description, total=total or None)
        assert self._task is not None
        self._progress.update(self._task, completed=current, total=total or None)

    def finish(self) -> None:
        if self._progress is not None:
            self._progress.stop()
            self._progress = None
            self._task = None


def configure_logging(verbose: bool = False) -> None:
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(message)s",
        datefmt="[%X]",
        handlers=[RichHandler(console=Console(stderr=True), show_path=False)],
    )

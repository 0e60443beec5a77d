"""
CLI Progress Adapter

Reports export and import steps on the terminal with a rich progress bar,
or as plain step lines when the output is not a terminal.
"""

import sys
from typing import Optional

from rich.console import Console
from rich.progress import (
    BarColumn, Progress, TaskID, TaskProgressColumn, TextColumn, TimeElapsedColumn
)

from ...core.domain import ProgressUpdate
from .silent import SilentProgressAdapter


class CLIProgressAdapter:
    """CLI progress reporting using rich"""

    def __init__(self, console: Optional[Console] = None):
        self.console = console or Console(stderr=True)
        self.current_task: Optional[TaskID] = None
        self.total_steps = 1
        self.current_step = 0
        self.progress = Progress(
            TextColumn("[bold blue]{task.description}"),
            BarColumn(),
            TaskProgressColumn(),
            TimeElapsedColumn(),
            console=self.console
        )

    def __enter__(self):
        """Context manager entry"""
        self.progress.__enter__()
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        """Context manager exit"""
        self.progress.__exit__(exc_type, exc_val, exc_tb)

    def update_progress(self, percent: int, message: str) -> None:
        """Update progress with percentage and message"""
        if self.current_task is None:
            self.current_task = self.progress.add_task(message, total=100)
        self.progress.update(self.current_task, completed=percent, description=message)

    def set_total_steps(self, total: int) -> None:
        """Set the total number of steps for the operation"""
        self.total_steps = max(total, 1)
        self.current_step = 0

    def increment_step(self, message: str) -> None:
        """Increment to the next step with a message"""
        self.current_step += 1
        percent = min(int((self.current_step / self.total_steps) * 100), 100)
        self.update_progress(percent, message)

    def report_progress(self, progress: ProgressUpdate) -> None:
        """Report detailed progress information"""
        self.update_progress(progress.percent, progress.message)

    def is_progress_enabled(self) -> bool:
        return True


class SimpleCLIProgressAdapter:
    """Plain step lines, for output that is not a terminal"""

    def __init__(self, console: Optional[Console] = None):
        self.console = console or Console(stderr=True)
        self.total_steps = 1
        self.current_step = 0

    def update_progress(self, percent: int, message: str) -> None:
        self.console.print(f"[{percent:3d}%] {message}", highlight=False)

    def set_total_steps(self, total: int) -> None:
        self.total_steps = max(total, 1)
        self.current_step = 0

    def increment_step(self, message: str) -> None:
        self.current_step += 1
        self.console.print(f"Step {self.current_step}/{self.total_steps}: {message}", highlight=False)

    def report_progress(self, progress: ProgressUpdate) -> None:
        self.update_progress(progress.percent, progress.message)

    def is_progress_enabled(self) -> bool:
        return True


def create_cli_progress_adapter(progress_type: str = "auto", console: Optional[Console] = None):
    """
    Factory function to create appropriate CLI progress adapter.

    Args:
        progress_type: Type of progress adapter ("rich", "simple", "silent", "auto")
        console: Optional rich console to write to

    Returns:
        Configured progress adapter
    """
    if progress_type == "auto":
        progress_type = "rich" if sys.stderr.isatty() else "simple"

    if progress_type == "rich":
        return CLIProgressAdapter(console=console)
    elif progress_type == "simple":
        return SimpleCLIProgressAdapter(console=console)
    elif progress_type == "silent":
        return SilentProgressAdapter()
    else:
        raise ValueError(f"Unknown progress type: {progress_type}")

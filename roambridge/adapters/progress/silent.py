"""
Progress sink for library use.

Export and import pipelines default to this adapter when no reporter is
given, so embedding applications see log records only.
"""

from ...core.domain import ProgressUpdate


class SilentProgressAdapter:
    """Discards export and import progress"""

    def update_progress(self, percent: int, message: str) -> None:
        """Ignore a percentage update such as a finished archive download"""

    def set_total_steps(self, total: int) -> None:
        """Ignore the step count a pipeline announces before it starts"""

    def increment_step(self, message: str) -> None:
        """Ignore a step such as 'Requesting export' or 'Staging import file'"""

    def report_progress(self, progress: ProgressUpdate) -> None:
        pass

    def is_progress_enabled(self) -> bool:
        return False

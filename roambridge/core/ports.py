"""
Port interfaces for the Roam bridge.

These interfaces define the contracts between the core services and the
browser, file-system and presentation adapters. They enable dependency
inversion and allow every service to be tested with fakes.
"""

from pathlib import Path
from typing import Any, List, Optional, Protocol

from playwright.async_api import Page

from .domain import Credentials, ExportArtifact, ProgressUpdate, SessionConfig, SessionState


class BrowserSessionPort(Protocol):
    """Port for the single authenticated browser session of a graph"""

    credentials: Credentials
    config: SessionConfig

    @property
    def state(self) -> SessionState:
        """Current lifecycle state"""
        ...

    async def ensure_ready(self) -> Page:
        """
        Bring the session to the Ready state and return its page.

        Concurrent callers share a single login attempt and observe its
        outcome.

        Returns:
            Authenticated Playwright page

        Raises:
            LoginFailure: If the login form or the post-login landmark never appeared
        """
        ...

    async def close(self) -> None:
        """
        Release the browser. Closing an already closed session is a no-op.
        """
        ...


class RemoteGraphApiPort(Protocol):
    """
    Narrow capability over the graph API object exposed inside the page.

    Every call checks that the object is present before using it and raises
    RemoteApiUnavailable otherwise.
    """

    async def is_present(self) -> bool:
        """Check whether the API object exists in the page context"""
        ...

    async def q(self, query: str, *args: Any) -> List[Any]:
        """Run a datalog query and return its raw rows"""
        ...

    async def create_block(self, parent_uid: str, text: str, order: int = 0) -> Any:
        """Insert a block under parent_uid and return the remote result"""
        ...

    async def delete_block(self, uid: str) -> None:
        """Delete the block identified by uid"""
        ...


class ExportLocatorPort(Protocol):
    """Port for finding downloaded export archives"""

    marker: str

    def find_latest(self, directory: Path) -> Optional[ExportArtifact]:
        """
        Find the most recently modified export archive in directory.

        Returns:
            The newest matching artifact, or None if nothing matches
        """
        ...


class ArchiveExtractorPort(Protocol):
    """Port for extracting the JSON payload of an export archive"""

    async def extract(self, archive_path: Path, output_directory: Path) -> Any:
        """
        Extract the archive's JSON member into output_directory and parse it.

        Raises:
            ArchiveParseFailure: If the member is missing or not valid JSON
        """
        ...


class ProgressReportingPort(Protocol):
    """Port for progress updates"""

    def update_progress(self, percent: int, message: str) -> None:
        """
        Update progress with percentage and message.

        Args:
            percent: Progress percentage (0-100)
            message: Human-readable progress message
        """
        ...

    def set_total_steps(self, total: int) -> None:
        """
        Set the total number of steps for the operation.

        Args:
            total: Total number of steps
        """
        ...

    def increment_step(self, message: str) -> None:
        """
        Increment to the next step with a message.

        Args:
            message: Message describing the current step
        """
        ...

    def report_progress(self, progress: ProgressUpdate) -> None:
        """Report detailed progress information."""
        ...

    def is_progress_enabled(self) -> bool:
        """Check if progress reporting is enabled."""
        ...


class ConfigurationPort(Protocol):
    """Port for configuration management"""

    def get_credentials(self) -> Credentials:
        """
        Get credentials for the graph.

        Raises:
            ConfigurationError: If credentials are missing
        """
        ...

    def get_session_config(self) -> SessionConfig:
        """Get resolved browser and file-system settings"""
        ...


class ExportPipelinePort(Protocol):
    """Port for exporting the whole graph"""

    async def export_graph(self, auto_remove_archive: bool = False) -> Any:
        """Export the graph and return its parsed JSON, closing the session afterwards"""
        ...


class ImportPipelinePort(Protocol):
    """Port for importing blocks into the graph"""

    async def import_blocks(self, items: List[Any]) -> List[Any]:
        """Import items and remove the block the import leaves on the daily note"""
        ...

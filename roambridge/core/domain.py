"""
Core domain models for the Roam Research bridge.

These models define the credentials, session configuration, lifecycle states
and file-system artifacts used throughout the application, independent of
any browser or infrastructure concerns.
"""

import os
import tempfile
from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from pathlib import Path
from typing import Any, Dict, Optional, Union

from .exceptions import ConfigurationError


DEFAULT_BASE_URL = "https://roamresearch.com/#/app/"


@dataclass(frozen=True)
class Credentials:
    """Login material for one graph; fixed for the lifetime of a session"""

    workspace_id: str
    login: str
    password: str = field(repr=False)

    def __post_init__(self):
        """Validate that every part of the triple is present"""
        missing = [name for name in ('workspace_id', 'login', 'password') if not getattr(self, name)]
        if missing:
            raise ConfigurationError(
                f"Missing credential fields: {', '.join(missing)}",
                missing_fields=missing
            )


@dataclass(frozen=True)
class SessionConfig:
    """
    Browser and file-system settings, resolved once at construction.

    The working directory is canonicalized (symlinks resolved) so that later
    lookups of downloaded archives and staged files are stable. A directory
    that does not exist or is not readable/writable is rejected here rather
    than at the first export or import.
    """

    run_headless: bool = True
    working_directory: Optional[Union[str, Path]] = None
    skip_download: bool = False
    base_url: str = DEFAULT_BASE_URL
    timeout_ms: int = 60000
    export_timeout_seconds: float = 60.0

    # Settle delays for UI and file-system effects that expose no completion signal
    menu_settle_seconds: float = 1.0
    dialog_step_seconds: float = 2.0
    import_settle_seconds: float = 3.0
    extraction_settle_seconds: float = 1.0
    close_settle_seconds: float = 1.0

    def __post_init__(self):
        directory = self.working_directory or tempfile.gettempdir()
        try:
            resolved = Path(directory).expanduser().resolve(strict=True)
        except (OSError, RuntimeError) as e:
            raise ConfigurationError(
                f"Working directory does not exist: {directory}",
                working_directory=str(directory)
            ) from e

        if not resolved.is_dir():
            raise ConfigurationError(
                f"Working directory is not a directory: {resolved}",
                working_directory=str(resolved)
            )
        if not os.access(resolved, os.R_OK | os.W_OK):
            raise ConfigurationError(
                f"Working directory must be readable and writable: {resolved}",
                working_directory=str(resolved)
            )

        if self.timeout_ms <= 0:
            raise ConfigurationError(f"timeout_ms must be positive, got: {self.timeout_ms}")
        if self.export_timeout_seconds <= 0:
            raise ConfigurationError(
                f"export_timeout_seconds must be positive, got: {self.export_timeout_seconds}"
            )

        object.__setattr__(self, 'working_directory', resolved)

    def workspace_url(self, workspace_id: str) -> str:
        """URL of the graph's application page"""
        return f"{self.base_url}{workspace_id}"


class SessionState(Enum):
    """Lifecycle of an authenticated browser session"""

    UNSTARTED = "unstarted"
    LAUNCHING = "launching"
    AUTHENTICATING = "authenticating"
    READY = "ready"
    CLOSED = "closed"
    ERROR = "error"


@dataclass(frozen=True)
class ExportArtifact:
    """A downloaded export archive discovered in the working directory"""

    file_path: Path
    last_modified: float

    @property
    def last_modified_at(self) -> datetime:
        return datetime.fromtimestamp(self.last_modified)


@dataclass
class ProgressUpdate:
    """Progress update information"""

    percent: int  # 0-100
    message: str
    current_step: int
    total_steps: int
    timestamp: datetime = field(default_factory=datetime.now)
    metadata: Dict[str, Any] = field(default_factory=dict)

    def __post_init__(self):
        """Validate percent is in valid range"""
        if not 0 <= self.percent <= 100:
            raise ValueError(f"Progress percent must be between 0 and 100, got: {self.percent}")

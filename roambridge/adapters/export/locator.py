"""
File-system locator for downloaded export archives.
"""

import logging
import os
from pathlib import Path
from typing import List, Optional, Union

from ...core.domain import ExportArtifact

logger = logging.getLogger(__name__)

EXPORT_FILE_MARKER = "Roam-Export"


class FileSystemExportLocator:
    """Finds the newest file whose name contains the export marker"""

    def __init__(self, marker: str = EXPORT_FILE_MARKER):
        self.marker = marker

    def list_exports(self, directory: Union[str, Path]) -> List[ExportArtifact]:
        """
        List matching regular files, newest first.

        Symbolic links are not followed. Files with equal modification times
        are ordered by name, descending.
        """
        artifacts = []
        with os.scandir(directory) as entries:
            for entry in entries:
                if self.marker not in entry.name:
                    continue
                if not entry.is_file(follow_symlinks=False):
                    continue
                artifacts.append(ExportArtifact(
                    file_path=Path(directory) / entry.name,
                    last_modified=entry.stat(follow_symlinks=False).st_mtime
                ))

        artifacts.sort(key=lambda a: (a.last_modified, a.file_path.name), reverse=True)
        return artifacts

    def find_latest(self, directory: Union[str, Path]) -> Optional[ExportArtifact]:
        """Most recently modified export in directory, or None"""
        artifacts = self.list_exports(directory)
        if not artifacts:
            logger.debug("No files containing '%s' in %s", self.marker, directory)
            return None

        latest = artifacts[0]
        logger.debug("Latest export: %s", latest.file_path)
        return latest

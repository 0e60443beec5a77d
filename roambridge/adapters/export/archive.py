"""
Export archive extraction.

An export archive holds one JSON member with the whole graph. That member is
streamed to a fixed file in the output directory, which is then parsed. All
other members are skipped.
"""

import asyncio
import json
import logging
import shutil
import zipfile
from pathlib import Path
from typing import Any, Union

from ...core.exceptions import ArchiveParseFailure

logger = logging.getLogger(__name__)

EXTRACTED_FILE_NAME = "db.json"
JSON_MEMBER_MARKER = ".json"
_COPY_CHUNK_SIZE = 1024 * 1024


class ArchiveExtractor:
    """Extracts and parses the JSON member of a Roam export archive"""

    def __init__(self, settle_seconds: float = 1.0, output_name: str = EXTRACTED_FILE_NAME):
        """
        Args:
            settle_seconds: Delay between closing the archive and reading the
                extracted file; some platforms hold file locks briefly after
                the write.
            output_name: File name of the extracted member in the output directory
        """
        self.settle_seconds = settle_seconds
        self.output_name = output_name

    async def extract(self, archive_path: Union[str, Path], output_directory: Union[str, Path]) -> Any:
        """
        Extract the archive's JSON member and return its parsed content.

        Raises:
            ArchiveParseFailure: If the archive is unreadable, holds no JSON
                member, or the member is not valid JSON
        """
        archive_path = Path(archive_path)
        output_path = Path(output_directory) / self.output_name

        # A file left by an earlier run must never be mistaken for this one's output
        output_path.unlink(missing_ok=True)

        try:
            written = await asyncio.to_thread(self._write_json_member, archive_path, output_path)
        except (zipfile.BadZipFile, OSError) as e:
            raise ArchiveParseFailure(
                f"Cannot read export archive {archive_path}: {e}",
                archive_path=archive_path
            ) from e

        if not written:
            raise ArchiveParseFailure(
                f"Export archive {archive_path} contains no '{JSON_MEMBER_MARKER}' member",
                archive_path=archive_path
            )

        await asyncio.sleep(self.settle_seconds)

        try:
            with open(output_path, 'r', encoding='utf-8') as f:
                return json.load(f)
        except (OSError, ValueError) as e:
            raise ArchiveParseFailure(
                f"Cannot parse extracted export {output_path}: {e}",
                archive_path=archive_path,
                output_path=str(output_path)
            ) from e

    def _write_json_member(self, archive_path: Path, output_path: Path) -> bool:
        written = False
        with zipfile.ZipFile(archive_path) as archive:
            for member in archive.infolist():
                if member.is_dir() or JSON_MEMBER_MARKER not in member.filename:
                    continue
                if written:
                    logger.warning("Ignoring additional JSON member %s in %s", member.filename, archive_path)
                    continue

                logger.debug("Extracting %s to %s", member.filename, output_path)
                with archive.open(member) as source, open(output_path, 'wb') as target:
                    shutil.copyfileobj(source, target, _COPY_CHUNK_SIZE)
                written = True

        return written

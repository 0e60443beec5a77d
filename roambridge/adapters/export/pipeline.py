"""
Graph export through the Roam UI.

There is no public export API, so the pipeline drives the application's
"Export All" dialog, waits for the browser download, locates the newest
archive in the working directory and extracts its JSON payload.

Known latency/fragility point: the UI exposes no "export complete" event.
The pipeline waits for the browser's download event, bounded by
`export_timeout_seconds` (one minute by default, reflecting observed export
times). Slow graphs or slow machines may need a larger bound. The dialog
steps themselves are separated by fixed settle delays.
"""

import asyncio
import logging
from pathlib import Path
from typing import Any, Optional

from playwright.async_api import Page
from playwright.async_api import TimeoutError as PlaywrightTimeoutError

from ...core.exceptions import ErrorBoundary, ExportNotFound
from ...core.ports import ArchiveExtractorPort, BrowserSessionPort, ExportLocatorPort, ProgressReportingPort
from ..progress.silent import SilentProgressAdapter
from ..roam.ui import MenuItems, RoamSelectors, click_menu_item

logger = logging.getLogger(__name__)


class ExportPipeline:
    """Exports the whole graph and returns its parsed JSON"""

    def __init__(
        self,
        session: BrowserSessionPort,
        locator: ExportLocatorPort,
        extractor: ArchiveExtractorPort,
        progress: Optional[ProgressReportingPort] = None
    ):
        self.session = session
        self.config = session.config
        self.locator = locator
        self.extractor = extractor
        self.progress = progress or SilentProgressAdapter()

    async def export_graph(self, auto_remove_archive: bool = False) -> Any:
        """
        Export the graph and return the decoded JSON.

        Unless the session is configured to skip downloading (replaying an
        archive already in the working directory), this logs in and drives
        the export dialog first. The session is closed when the pipeline
        finishes, whether or not it succeeded.

        Args:
            auto_remove_archive: Delete the archive after a successful extraction

        Returns:
            Parsed graph (opaque JSON)

        Raises:
            LoginFailure: If the session cannot log in
            ExportNotFound: If no export archive is found in the working directory
            ArchiveParseFailure: If the archive's JSON member is missing or invalid
        """
        directory = self.config.working_directory
        self.progress.set_total_steps(3 if self.config.skip_download else 5)

        try:
            with ErrorBoundary("export", {'working_directory': str(directory)}):
                return await self._run(directory, auto_remove_archive)
        finally:
            await self.session.close()

    async def _run(self, directory: Path, auto_remove_archive: bool) -> Any:
        if not self.config.skip_download:
            self.progress.increment_step("Logging in")
            page = await self.session.ensure_ready()
            await self.download_export(page)

        self.progress.increment_step("Locating export archive")
        artifact = self.locator.find_latest(directory)
        if artifact is None:
            raise ExportNotFound(directory, self.locator.marker)

        self.progress.increment_step(f"Extracting {artifact.file_path.name}")
        graph = await self.extractor.extract(artifact.file_path, directory)

        if auto_remove_archive:
            artifact.file_path.unlink()
            logger.info("Removed export archive %s", artifact.file_path)

        self.progress.increment_step("Export complete")
        return graph

    async def download_export(self, page: Page) -> None:
        """
        Drive the export dialog and save the downloaded archive to the
        working directory.

        Raises:
            ExportNotFound: If no download starts within the export timeout
        """
        self.progress.increment_step("Requesting export")
        await page.wait_for_selector(RoamSelectors.MORE_MENU)
        await click_menu_item(page, MenuItems.EXPORT_ALL, self.config.menu_settle_seconds)

        # Switch the format dropdown from Markdown to JSON
        await asyncio.sleep(self.config.dialog_step_seconds)
        await page.click(RoamSelectors.EXPORT_FORMAT_BUTTON)
        await asyncio.sleep(self.config.dialog_step_seconds)
        await page.click(RoamSelectors.EXPORT_FORMAT_JSON)
        await asyncio.sleep(self.config.dialog_step_seconds)

        timeout_ms = self.config.export_timeout_seconds * 1000
        try:
            async with page.expect_download(timeout=timeout_ms) as download_info:
                await page.click(RoamSelectors.EXPORT_CONFIRM)
            download = await download_info.value
        except PlaywrightTimeoutError as e:
            raise ExportNotFound(
                self.config.working_directory,
                self.locator.marker,
                reason=f"no download started within {self.config.export_timeout_seconds}s"
            ) from e

        target = self.config.working_directory / download.suggested_filename
        await download.save_as(target)
        logger.info("Saved export archive to %s", target)

"""
Block import through the Roam UI.

Stages the blocks as a JSON file in the working directory, uploads it
through the "Import Files" dialog, and removes the "Import" block the
application leaves on the daily note afterwards.
"""

import asyncio
import json
import logging
from datetime import date
from pathlib import Path
from typing import Any, Callable, List, Optional

from playwright.async_api import TimeoutError as PlaywrightTimeoutError

from ...core.exceptions import ErrorBoundary, UploadTargetMissing
from ...core.ports import BrowserSessionPort, ProgressReportingPort
from ...core.queries import daily_note_title, find_blocks_on_page
from ...core.query_bridge import QueryBridge
from ..progress.silent import SilentProgressAdapter
from ..roam.ui import MenuItems, RoamSelectors, click_menu_item

logger = logging.getLogger(__name__)

STAGED_FILE_NAME = "roambridge-import.json"
IMPORT_ARTIFACT_TEXT = "Import"


class ImportPipeline:
    """Imports blocks into the graph"""

    def __init__(
        self,
        session: BrowserSessionPort,
        bridge: QueryBridge,
        progress: Optional[ProgressReportingPort] = None,
        today: Callable[[], date] = date.today
    ):
        self.session = session
        self.config = session.config
        self.bridge = bridge
        self.progress = progress or SilentProgressAdapter()
        self.today = today

    @property
    def staged_file(self) -> Path:
        return self.config.working_directory / STAGED_FILE_NAME

    def stage(self, items: List[Any]) -> Path:
        """Write items as JSON to the staging file and return its path"""
        path = self.staged_file
        with open(path, 'w', encoding='utf-8') as f:
            json.dump(items, f, ensure_ascii=False)
        logger.debug("Staged %d item(s) in %s", len(items), path)
        return path

    async def import_blocks(self, items: List[Any]) -> List[Any]:
        """
        Import items into the graph.

        The cleanup step deletes a block, so it relies on the deletion
        safety ceiling of the query bridge.

        Returns:
            The rows removed by the cleanup step

        Raises:
            LoginFailure: If the session cannot log in
            UploadTargetMissing: If the import dialog has no file input;
                nothing has been sent to the graph at that point
            UnsafeQueryResult: If the cleanup query matches too many blocks
        """
        with ErrorBoundary("import", {'staged_file': str(self.staged_file)}):
            return await self._run(items)

    async def _run(self, items: List[Any]) -> List[Any]:
        self.progress.set_total_steps(3)

        self.progress.increment_step("Staging import file")
        path = self.stage(items)

        self.progress.increment_step("Uploading import file")
        page = await self.session.ensure_ready()
        await page.wait_for_selector(RoamSelectors.MORE_MENU)
        await click_menu_item(page, MenuItems.IMPORT_FILES, self.config.menu_settle_seconds)

        try:
            await page.wait_for_selector(RoamSelectors.FILE_INPUT, state='attached')
        except PlaywrightTimeoutError as e:
            raise UploadTargetMissing(RoamSelectors.FILE_INPUT) from e
        await asyncio.sleep(self.config.menu_settle_seconds)

        upload_input = await page.query_selector(RoamSelectors.FILE_INPUT)
        if upload_input is None:
            raise UploadTargetMissing(RoamSelectors.FILE_INPUT)
        await upload_input.set_input_files(str(path))

        await page.wait_for_selector(RoamSelectors.IMPORT_CONFIRM)
        await page.click(RoamSelectors.IMPORT_CONFIRM)
        await asyncio.sleep(self.config.import_settle_seconds)

        self.progress.increment_step("Removing import block from daily note")
        removed = await self.remove_import_block()
        logger.info("Imported %d item(s)", len(items))
        return removed

    async def remove_import_block(self) -> List[Any]:
        """
        Delete the "Import" block the application adds to today's daily note.

        THIS DELETES A BLOCK. At most one block is removed.
        """
        query = find_blocks_on_page(IMPORT_ARTIFACT_TEXT, daily_note_title(self.today()))
        removed = await self.bridge.delete_matching(query, limit=1)
        # Give the deletion time to sync
        await asyncio.sleep(self.config.menu_settle_seconds)
        return removed

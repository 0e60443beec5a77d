"""
Integration tests for graph export.

Runs the export pipeline with the real locator and extractor over a fake
browser whose download produces a real zip archive.
"""

import io
import json
import os
import zipfile

import pytest

from roambridge.adapters.auth.browser_session import RoamBrowserSession
from roambridge.adapters.export.archive import EXTRACTED_FILE_NAME, ArchiveExtractor
from roambridge.adapters.export.locator import FileSystemExportLocator
from roambridge.adapters.export.pipeline import ExportPipeline
from roambridge.adapters.roam.ui import CLICK_MENU_ITEM_SCRIPT, RoamSelectors
from roambridge.core.domain import SessionState
from roambridge.core.exceptions import ExportNotFound, LoginFailure, MenuItemNotFound
from tests.fixtures.test_helpers import (
    FakeDownload, TestDataGenerator, make_export_archive, make_session_config
)


def zip_payload(graph):
    buffer = io.BytesIO()
    with zipfile.ZipFile(buffer, 'w') as archive:
        archive.writestr("test-graph.json", json.dumps(graph))
        archive.writestr("assets/image.png", b"\x89PNG")
    return buffer.getvalue()


class RecordingExtractor(ArchiveExtractor):
    def __init__(self):
        super().__init__(settle_seconds=0)
        self.calls = []

    async def extract(self, archive_path, output_directory):
        self.calls.append(archive_path)
        return await super().extract(archive_path, output_directory)


class RecordingProgress:
    def __init__(self):
        self.total = None
        self.steps = []

    def update_progress(self, percent, message):
        pass

    def set_total_steps(self, total):
        self.total = total

    def increment_step(self, message):
        self.steps.append(message)

    def report_progress(self, progress):
        pass

    def is_progress_enabled(self):
        return True


def build_pipeline(credentials, config, browser_env, progress=None):
    session = RoamBrowserSession(credentials, config, playwright_factory=browser_env.playwright_factory)
    extractor = RecordingExtractor()
    pipeline = ExportPipeline(session, FileSystemExportLocator(), extractor, progress=progress)
    return pipeline, session, extractor


class TestDownloadedExport:
    """Test export through the export dialog."""

    @pytest.mark.asyncio
    async def test_full_export(self, credentials, session_config, browser_env, working_dir):
        """Test the dialog is driven, the download saved, and the graph returned."""
        graph = TestDataGenerator.graph_pages(3)
        browser_env.download = FakeDownload("Roam-Export-1760000000.zip", zip_payload(graph))
        progress = RecordingProgress()
        pipeline, session, extractor = build_pipeline(credentials, session_config, browser_env, progress)

        result = await pipeline.export_graph()

        assert result == graph
        assert (working_dir / "Roam-Export-1760000000.zip").exists()
        assert (working_dir / EXTRACTED_FILE_NAME).exists()
        assert extractor.calls == [working_dir.resolve() / "Roam-Export-1760000000.zip"]

        page = browser_env.page
        assert page.called('click')[-3:] == [
            ('click', RoamSelectors.EXPORT_FORMAT_BUTTON),
            ('click', RoamSelectors.EXPORT_FORMAT_JSON),
            ('click', RoamSelectors.EXPORT_CONFIRM),
        ]
        assert ('evaluate', CLICK_MENU_ITEM_SCRIPT, [RoamSelectors.MENU_ITEMS, 'Export All']) in page.calls
        assert page.called('expect_download') == [('expect_download', 5000)]

        assert progress.total == 5
        assert len(progress.steps) == 5

    @pytest.mark.asyncio
    async def test_session_closed_after_export(self, credentials, session_config, browser_env):
        """Test the pipeline closes the session when it finishes."""
        browser_env.download = FakeDownload("Roam-Export-1.zip", zip_payload([]))
        pipeline, session, _ = build_pipeline(credentials, session_config, browser_env)

        await pipeline.export_graph()

        assert session.state is SessionState.CLOSED
        assert browser_env.browsers[0].closed

    @pytest.mark.asyncio
    async def test_auto_remove_archive(self, credentials, session_config, browser_env, working_dir):
        """Test the archive can be deleted after extraction."""
        browser_env.download = FakeDownload("Roam-Export-1.zip", zip_payload([{"title": "x"}]))
        pipeline, _, _ = build_pipeline(credentials, session_config, browser_env)

        await pipeline.export_graph(auto_remove_archive=True)

        assert not (working_dir / "Roam-Export-1.zip").exists()
        assert (working_dir / EXTRACTED_FILE_NAME).exists()

    @pytest.mark.asyncio
    async def test_download_never_starts(self, credentials, session_config, browser_env):
        """Test a missing download raises ExportNotFound and still closes the session."""
        pipeline, session, extractor = build_pipeline(credentials, session_config, browser_env)

        with pytest.raises(ExportNotFound, match="no download started"):
            await pipeline.export_graph()

        assert extractor.calls == []
        assert session.state is SessionState.CLOSED

    @pytest.mark.asyncio
    async def test_export_menu_missing(self, credentials, session_config, browser_env):
        """Test a missing menu entry surfaces as MenuItemNotFound."""
        browser_env.menu_items = set()
        pipeline, session, _ = build_pipeline(credentials, session_config, browser_env)

        with pytest.raises(MenuItemNotFound):
            await pipeline.export_graph()

        assert session.state is SessionState.CLOSED

    @pytest.mark.asyncio
    async def test_login_failure_propagates(self, credentials, session_config, browser_env):
        """Test a failed login aborts the export."""
        browser_env.missing_selectors.add(RoamSelectors.EMAIL_INPUT)
        pipeline, _, extractor = build_pipeline(credentials, session_config, browser_env)

        with pytest.raises(LoginFailure):
            await pipeline.export_graph()

        assert extractor.calls == []


class TestSkipDownload:
    """Test replaying an archive already in the working directory."""

    @pytest.mark.asyncio
    async def test_uses_newest_existing_archive(self, credentials, browser_env, working_dir):
        """Test no browser is launched and the newest archive is used."""
        old = make_export_archive(working_dir, "Roam-Export-1.zip", ["old"])
        make_export_archive(working_dir, "Roam-Export-2.zip", ["new"])
        os.utime(old, (1_000_000, 1_000_000))
        config = make_session_config(working_dir, skip_download=True)
        progress = RecordingProgress()
        pipeline, _, _ = build_pipeline(credentials, config, browser_env, progress)

        assert await pipeline.export_graph() == ["new"]
        assert browser_env.launches == 0
        assert progress.total == 3

    @pytest.mark.asyncio
    async def test_no_archive(self, credentials, browser_env, working_dir):
        """Test an empty working directory raises ExportNotFound without extracting."""
        config = make_session_config(working_dir, skip_download=True)
        pipeline, session, extractor = build_pipeline(credentials, config, browser_env)

        with pytest.raises(ExportNotFound) as exc_info:
            await pipeline.export_graph()

        assert exc_info.value.directory == working_dir.resolve()
        assert exc_info.value.marker == "Roam-Export"
        assert extractor.calls == []
        assert browser_env.launches == 0
        assert session.state is SessionState.CLOSED

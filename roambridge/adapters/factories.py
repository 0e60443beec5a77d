"""
Graph Service Factory

Infrastructure layer wiring: builds the browser session, query bridge and
pipelines for one graph and hands them to the core service, so the core
never imports concrete adapters.
"""

from typing import Callable, Optional

from ..core.domain import Credentials, SessionConfig
from ..core.ports import ConfigurationPort, ProgressReportingPort
from ..core.query_bridge import QueryBridge
from ..core.services import RoamGraphService
from .auth.browser_session import RoamBrowserSession
from .browser.resource_policy import ResourceBlockingPolicy
from .export.archive import ArchiveExtractor
from .export.locator import FileSystemExportLocator
from .export.pipeline import ExportPipeline
from .importer.pipeline import ImportPipeline
from .progress.silent import SilentProgressAdapter
from .roam.alpha_api import RoamAlphaApi


def create_graph_service(
    credentials: Credentials,
    config: Optional[SessionConfig] = None,
    progress: Optional[ProgressReportingPort] = None,
    playwright_factory: Optional[Callable] = None
) -> RoamGraphService:
    """
    Create a graph service with its own browser session.

    Args:
        credentials: Graph, login and password
        config: Browser and file-system settings (defaults apply if omitted)
        progress: Progress reporter for export and import
        playwright_factory: Alternative Playwright entry point

    Returns:
        Service ready for use; the browser is launched on first use
    """
    config = config or SessionConfig()
    progress = progress or SilentProgressAdapter()

    session = RoamBrowserSession(
        credentials,
        config,
        blocking_policy=ResourceBlockingPolicy(),
        playwright_factory=playwright_factory
    )
    bridge = QueryBridge(session, RoamAlphaApi)
    exporter = ExportPipeline(
        session,
        FileSystemExportLocator(),
        ArchiveExtractor(settle_seconds=config.extraction_settle_seconds),
        progress=progress
    )
    importer = ImportPipeline(session, bridge, progress=progress)

    return RoamGraphService(session, bridge, exporter, importer)


def create_graph_service_from_config(
    config_adapter: ConfigurationPort,
    progress: Optional[ProgressReportingPort] = None
) -> RoamGraphService:
    """Create a graph service from a configuration adapter"""
    return create_graph_service(
        config_adapter.get_credentials(),
        config_adapter.get_session_config(),
        progress=progress
    )

"""
Graph service: the public operations of the bridge.

One RoamGraphService owns exactly one browser session. Create it once and
pass it to every call site that works with the graph; nothing is shared
through module-level state.
"""

from datetime import date
from typing import Any, Callable, List, Optional

from .domain import SessionState
from .ports import BrowserSessionPort, ExportPipelinePort, ImportPipelinePort
from .queries import daily_note_uid, find_blocks_on_page_uid
from .query_bridge import QueryBridge


class RoamGraphService:
    """
    Queries, block mutations, export and import for one graph.

    The browser session is created lazily by the first operation that needs
    it; call start() to log in eagerly instead.
    """

    def __init__(
        self,
        session: BrowserSessionPort,
        bridge: QueryBridge,
        exporter: ExportPipelinePort,
        importer: ImportPipelinePort,
        today: Callable[[], date] = date.today
    ):
        self.session = session
        self.bridge = bridge
        self.exporter = exporter
        self.importer = importer
        self.today = today

    @property
    def state(self) -> SessionState:
        return self.session.state

    async def start(self) -> 'RoamGraphService':
        """Log in now rather than on first use"""
        await self.session.ensure_ready()
        return self

    def daily_note_uid(self) -> str:
        return daily_note_uid(self.today())

    async def create_daily_note_block(self, text: str) -> Any:
        """Create a block at the top of today's daily note"""
        return await self.bridge.create_block(text, self.daily_note_uid())

    async def run_query(self, query: str, *args: Any) -> Any:
        """Run a datalog query and return the raw rows"""
        return await self.bridge.execute(query, *args)

    async def create_block(self, text: str, parent_uid: str) -> Any:
        """Create a block as the first child of parent_uid"""
        return await self.bridge.create_block(text, parent_uid)

    async def delete_blocks_matching_query(self, query: str, limit: Optional[int] = 1) -> List[Any]:
        """
        Delete blocks matching query. THIS IS UNSAFE.

        See QueryBridge.delete_matching for the protections that apply.
        """
        return await self.bridge.delete_matching(query, limit)

    async def get_all_blocks_on_daily_note(self) -> List[Any]:
        """Rows of [text, uid] for every block on today's daily note"""
        return await self.bridge.execute(find_blocks_on_page_uid(self.daily_note_uid()))

    async def export_graph(self, auto_remove_archive: bool = False) -> Any:
        """Export the graph as parsed JSON. Closes the session when done."""
        return await self.exporter.export_graph(auto_remove_archive)

    async def import_blocks(self, items: List[Any]) -> List[Any]:
        """Import items into the graph"""
        return await self.importer.import_blocks(items)

    async def close(self) -> None:
        await self.session.close()

    async def __aenter__(self) -> 'RoamGraphService':
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        await self.close()

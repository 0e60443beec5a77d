"""
Typed access to `window.roamAlphaAPI` inside an authenticated page.

Each operation runs a small script that first checks the API object is
present and answers with an envelope ``{available, value}``. A missing
object becomes RemoteApiUnavailable, so "no rows" and "API not reachable"
can never be confused.
"""

import logging
from typing import Any, Dict, List

from playwright.async_api import Page

from ...core.exceptions import RemoteApiUnavailable

logger = logging.getLogger(__name__)

PROBE_SCRIPT = "() => Boolean(window.roamAlphaAPI)"

QUERY_SCRIPT = """async ([query, args]) => {
    const api = window.roamAlphaAPI;
    if (!api) {
        return { available: false };
    }
    return { available: true, value: await api.q(query, ...args) };
}"""

CREATE_BLOCK_SCRIPT = """async ([parentUid, text, order]) => {
    const api = window.roamAlphaAPI;
    if (!api) {
        return { available: false };
    }
    const value = await api.createBlock({
        location: { 'parent-uid': parentUid, order: order },
        block: { string: text },
    });
    return { available: true, value: value === undefined ? null : value };
}"""

DELETE_BLOCK_SCRIPT = """async ([uid]) => {
    const api = window.roamAlphaAPI;
    if (!api) {
        return { available: false };
    }
    await api.deleteBlock({ block: { uid: uid } });
    return { available: true, value: null };
}"""


class RoamAlphaApi:
    """RemoteGraphApiPort implementation over a Playwright page"""

    def __init__(self, page: Page):
        self.page = page

    async def is_present(self) -> bool:
        return bool(await self.page.evaluate(PROBE_SCRIPT))

    async def _call(self, operation: str, script: str, arg: List[Any]) -> Any:
        envelope: Dict[str, Any] = await self.page.evaluate(script, arg)
        if not envelope or not envelope.get('available'):
            raise RemoteApiUnavailable(operation, url=self.page.url)
        return envelope.get('value')

    async def q(self, query: str, *args: Any) -> List[Any]:
        return await self._call('q', QUERY_SCRIPT, [query, list(args)])

    async def create_block(self, parent_uid: str, text: str, order: int = 0) -> Any:
        return await self._call('createBlock', CREATE_BLOCK_SCRIPT, [parent_uid, text, order])

    async def delete_block(self, uid: str) -> None:
        await self._call('deleteBlock', DELETE_BLOCK_SCRIPT, [uid])

"""
Query bridge between the core services and the graph API inside the page.

Forwards query and mutation requests into the authenticated page and returns
the raw results. The bridge brings the session to Ready itself instead of
relying on callers to log in first.
"""

import logging
from typing import Any, Callable, List, Optional

from playwright.async_api import Page

from .exceptions import UnsafeQueryResult
from .ports import BrowserSessionPort, RemoteGraphApiPort

logger = logging.getLogger(__name__)

# Upper bound on rows a deletion query may match before anything is deleted
DELETE_SAFETY_CEILING = 100


class QueryBridge:
    """Executes queries and block mutations through the in-page graph API"""

    def __init__(
        self,
        session: BrowserSessionPort,
        remote_api_factory: Callable[[Page], RemoteGraphApiPort],
        safety_ceiling: int = DELETE_SAFETY_CEILING
    ):
        """
        Args:
            session: Session that owns the page
            remote_api_factory: Builds the API capability for an authenticated page
            safety_ceiling: Maximum rows a deletion query may return
        """
        self.session = session
        self.remote_api_factory = remote_api_factory
        self.safety_ceiling = safety_ceiling

    async def _remote_api(self) -> RemoteGraphApiPort:
        page = await self.session.ensure_ready()
        return self.remote_api_factory(page)

    async def execute(self, query: str, *args: Any) -> Any:
        """
        Run a datalog query in the page and return the raw rows.

        Raises:
            LoginFailure: If the session cannot be brought to Ready
            RemoteApiUnavailable: If the API object is missing from the page
        """
        api = await self._remote_api()
        logger.debug("Running query: %s", query)
        return await api.q(query, *args)

    async def create_block(self, text: str, parent_uid: str) -> Any:
        """Insert a block as the first child of parent_uid and return the remote identifier"""
        api = await self._remote_api()
        logger.debug("Creating block under %s", parent_uid)
        return await api.create_block(parent_uid, text, order=0)

    async def delete_matching(self, query: str, limit: Optional[int] = 1) -> List[Any]:
        """
        Delete the blocks matched by query.

        THIS IS DESTRUCTIVE. There is no confirmation step: the query must
        project the block uid as its first column, and at most `limit` of the
        returned rows are deleted, in the order they were returned. Nothing
        is deleted when the query matches more rows than the safety ceiling.

        Args:
            query: Datalog query returning block uids
            limit: Maximum number of blocks to delete (defaults to 1)

        Returns:
            The rows that were deleted

        Raises:
            UnsafeQueryResult: If the query matched more rows than the ceiling
            RemoteApiUnavailable: If the API object is missing from the page
        """
        if not limit:
            limit = 1
        if limit < 0:
            raise ValueError(f"limit must be positive, got: {limit}")

        api = await self._remote_api()
        rows = await api.q(query)
        if len(rows) > self.safety_ceiling:
            raise UnsafeQueryResult(len(rows), self.safety_ceiling, query=query)

        limited = list(rows[:limit])
        for row in limited:
            uid = row[0]
            logger.info("Deleting block %s", uid)
            await api.delete_block(uid)

        return limited

"""
Request blocking policy for the Roam page.

Stylesheets, fonts and images are not needed to drive the application and
only slow page loads down, so their requests are aborted.
"""

import logging
from dataclasses import dataclass, field
from typing import FrozenSet

from playwright.async_api import Route

logger = logging.getLogger(__name__)

DEFAULT_BLOCKED_RESOURCE_TYPES = frozenset({"stylesheet", "font", "image"})


@dataclass(frozen=True)
class ResourceBlockingPolicy:
    """Aborts requests whose resource type is in blocked_resource_types"""

    blocked_resource_types: FrozenSet[str] = field(default=DEFAULT_BLOCKED_RESOURCE_TYPES)

    def should_block(self, resource_type: str) -> bool:
        return (resource_type or "").lower() in self.blocked_resource_types

    async def handle(self, route: Route) -> None:
        """Route handler: abort blocked requests, let everything else through"""
        request = route.request
        if self.should_block(request.resource_type):
            logger.debug("Blocked %s: %s", request.resource_type, request.url)
            await route.abort()
        else:
            await route.continue_()

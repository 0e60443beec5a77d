"""
Authenticated browser session adapter for Roam Research.

Owns the one browser/page pair of a graph and runs the login state machine:

    UNSTARTED -> LAUNCHING -> AUTHENTICATING -> READY -> CLOSED
                      \\              \\
                       +----> ERROR <-+

Concurrent callers of ensure_ready() share a single login attempt: the first
caller drives it, the others wait for it to finish and then observe its
outcome. A failed login is never retried automatically, since blind retries
against a login form risk locking the account.
"""

import asyncio
import logging
from dataclasses import dataclass, field
from typing import Callable, Optional

from playwright.async_api import Browser, BrowserContext, Page, Playwright, async_playwright
from playwright.async_api import Error as PlaywrightError

from ...core.domain import Credentials, SessionConfig, SessionState
from ...core.exceptions import LoginFailure, describe_errors
from ..browser.resource_policy import ResourceBlockingPolicy
from ..roam.alpha_api import PROBE_SCRIPT
from ..roam.ui import RoamSelectors

logger = logging.getLogger(__name__)


@dataclass
class _LoginAttempt:
    """Single-flight guard of one login sequence"""

    finished: asyncio.Event = field(default_factory=asyncio.Event)
    error: Optional[Exception] = None


class RoamBrowserSession:
    """Roam implementation of the authenticated browser session"""

    def __init__(
        self,
        credentials: Credentials,
        config: Optional[SessionConfig] = None,
        blocking_policy: Optional[ResourceBlockingPolicy] = None,
        playwright_factory: Optional[Callable] = None
    ):
        """
        Initialize browser session. Nothing is launched until the first
        call to ensure_ready().

        Args:
            credentials: Graph, login and password
            config: Browser and file-system settings
            blocking_policy: Request filter installed on the page
            playwright_factory: Callable returning a Playwright context manager
                (defaults to async_playwright)
        """
        self.credentials = credentials
        self.config = config or SessionConfig()
        self.blocking_policy = blocking_policy or ResourceBlockingPolicy()
        self._playwright_factory = playwright_factory or async_playwright

        # Browser state
        self._playwright: Optional[Playwright] = None
        self._browser: Optional[Browser] = None
        self._context: Optional[BrowserContext] = None
        self._page: Optional[Page] = None
        self._state = SessionState.UNSTARTED
        self._login_in_flight: Optional[_LoginAttempt] = None
        # Bumped by close(); a login that sees it change was abandoned
        self._generation = 0
        self.login_attempts = 0

    @property
    def state(self) -> SessionState:
        return self._state

    @property
    def login_in_flight(self) -> bool:
        return self._login_in_flight is not None

    def is_authenticated(self) -> bool:
        """
        Check if session is authenticated and its page is open.

        This does not look inside the page; see is_alive().
        """
        return (self._state is SessionState.READY and
                self._page is not None and
                not self._page.is_closed())

    async def is_alive(self) -> bool:
        """Liveness probe: is the graph API object still present in the page?"""
        if self._page is None or self._page.is_closed():
            return False
        try:
            return bool(await self._page.evaluate(PROBE_SCRIPT))
        except PlaywrightError as e:
            logger.debug("Liveness probe failed: %s", e)
            return False

    async def ensure_ready(self) -> Page:
        """
        Bring the session to READY and return its page.

        A READY session is re-validated with the liveness probe, so a page
        that silently lost its session (for example after a reload) leads
        to a new login instead of being trusted.

        Returns:
            Authenticated Playwright page

        Raises:
            LoginFailure: If the login screen or the post-login landmark
                never appeared, for this caller's attempt or the attempt it
                waited on
        """
        while True:
            if self._state is SessionState.READY:
                if await self.is_alive():
                    return self._page
                logger.warning("Session for graph %s is no longer logged in", self.credentials.workspace_id)

            attempt = self._login_in_flight
            if attempt is None:
                break

            logger.debug("Waiting for login already in flight")
            await attempt.finished.wait()
            if attempt.error is not None:
                raise attempt.error
            # Re-check state instead of assuming the other attempt succeeded

        attempt = _LoginAttempt()
        self._login_in_flight = attempt
        generation = self._generation
        try:
            page = await self._log_in(generation)
        except Exception as e:
            attempt.error = e
            if generation != self._generation:
                # close() ran during the attempt; drop whatever the attempt opened since
                await self._release_browser()
                self._state = SessionState.CLOSED
            else:
                self._state = SessionState.ERROR
                await self._release_browser()
            raise
        finally:
            self._login_in_flight = None
            attempt.finished.set()

        return page

    def _check_not_closed(self, generation: int, stage: SessionState) -> None:
        if generation != self._generation:
            raise LoginFailure(
                "Session was closed during login",
                stage=stage.value,
                workspace_id=self.credentials.workspace_id
            )

    async def _log_in(self, generation: int) -> Page:
        # Drop handles left over from a lost session
        await self._release_browser()

        workspace_id = self.credentials.workspace_id
        self.login_attempts += 1
        self._state = SessionState.LAUNCHING
        logger.info("Launching browser for graph %s", workspace_id)

        try:
            page = await self._launch()
            await page.goto(self.config.workspace_url(workspace_id), wait_until='domcontentloaded')
            await page.wait_for_selector(RoamSelectors.EMAIL_INPUT)
        except PlaywrightError as e:
            raise LoginFailure(
                f"Cannot load the login screen: {e}",
                stage=SessionState.LAUNCHING.value,
                workspace_id=workspace_id
            ) from e
        self._check_not_closed(generation, SessionState.LAUNCHING)

        self._state = SessionState.AUTHENTICATING
        logger.info("Logging in to graph %s", workspace_id)

        try:
            await page.fill(RoamSelectors.EMAIL_INPUT, self.credentials.login)
            await page.fill(RoamSelectors.PASSWORD_INPUT, self.credentials.password)
            await page.click(RoamSelectors.LOGIN_BUTTON)
            await page.wait_for_selector(RoamSelectors.MORE_MENU)
        except PlaywrightError as e:
            raise LoginFailure(
                f"Login did not complete: {e}",
                stage=SessionState.AUTHENTICATING.value,
                workspace_id=workspace_id
            ) from e
        self._check_not_closed(generation, SessionState.AUTHENTICATING)

        self._state = SessionState.READY
        logger.info("Logged in to graph %s", workspace_id)
        return page

    async def _launch(self) -> Page:
        # Each handle is stored as soon as it exists so close() can release it
        playwright = self._playwright = await self._playwright_factory().start()
        browser = self._browser = await playwright.chromium.launch(headless=self.config.run_headless)
        context = self._context = await browser.new_context(accept_downloads=True)
        page = self._page = await context.new_page()

        page.set_default_timeout(self.config.timeout_ms)
        page.set_default_navigation_timeout(self.config.timeout_ms)
        await page.route('**/*', self.blocking_policy.handle)
        return page

    async def close(self) -> None:
        """
        Close browser session and release its handles.

        Closing an already closed session is a no-op. A login still in
        flight is abandoned: its callers get LoginFailure and the session
        stays CLOSED.
        """
        self._generation += 1
        if self._browser is not None or self._playwright is not None:
            if self._page is not None and not self._page.is_closed():
                # Let in-flight UI work settle before tearing the browser down
                await asyncio.sleep(self.config.close_settle_seconds)
            await self._release_browser()
            logger.info("Closed browser for graph %s", self.credentials.workspace_id)

        self._state = SessionState.CLOSED

    async def _release_browser(self) -> None:
        # Detach first so a concurrent release never closes the same handle twice
        context, browser, playwright = self._context, self._browser, self._playwright
        self._page = None
        self._context = None
        self._browser = None
        self._playwright = None

        errors = []
        if context is not None:
            try:
                await context.close()
            except Exception as e:
                errors.append(e)
        if browser is not None:
            try:
                await browser.close()
            except Exception as e:
                errors.append(e)
        if playwright is not None:
            try:
                await playwright.stop()
            except Exception as e:
                errors.append(e)

        if errors:
            logger.warning(
                "Errors while releasing browser for graph %s: %s",
                self.credentials.workspace_id, describe_errors(errors)
            )

    async def __aenter__(self) -> 'RoamBrowserSession':
        """Context manager entry"""
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        """Context manager exit"""
        await self.close()

"""
Selectors and menu navigation for the Roam web application.

The application is built on Blueprint; its class names are the only stable
hooks into the DOM.
"""

import asyncio
import logging

from playwright.async_api import Page

from ...core.exceptions import MenuItemNotFound


logger = logging.getLogger(__name__)


class RoamSelectors:
    """CSS selectors used to drive the application"""

    EMAIL_INPUT = 'input[name=email]'
    PASSWORD_INPUT = 'input[name=password]'
    LOGIN_BUTTON = '.bp3-button'

    # Overflow menu button; only rendered once the user is logged in
    MORE_MENU = '.bp3-icon-more'
    MENU_ITEMS = '.bp3-menu li a'

    EXPORT_FORMAT_BUTTON = '.bp3-dialog-container .bp3-popover-wrapper button'
    EXPORT_FORMAT_JSON = '.bp3-dialog-container .bp3-popover-wrapper .bp3-popover-dismiss'
    EXPORT_CONFIRM = '.bp3-dialog-container .bp3-intent-primary'

    FILE_INPUT = 'input[type=file]'
    IMPORT_CONFIRM = '.bp3-dialog .bp3-intent-primary'


class MenuItems:
    EXPORT_ALL = 'Export All'
    IMPORT_FILES = 'Import Files'


CLICK_MENU_ITEM_SCRIPT = """([selector, title]) => {
    const items = [...document.querySelectorAll(selector)];
    const item = items.find((candidate) => candidate.innerText === title);
    if (!item) {
        return false;
    }
    item.click();
    return true;
}"""


async def click_menu_item(page: Page, title: str, settle_seconds: float = 1.0) -> None:
    """
    Open the overflow menu and click the entry whose text is `title`.

    Raises:
        MenuItemNotFound: If no menu entry has that text
    """
    logger.debug("Opening menu item '%s'", title)
    await page.click(RoamSelectors.MORE_MENU)
    await asyncio.sleep(settle_seconds)

    clicked = await page.evaluate(CLICK_MENU_ITEM_SCRIPT, [RoamSelectors.MENU_ITEMS, title])
    if not clicked:
        raise MenuItemNotFound(title)

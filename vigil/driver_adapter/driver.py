import json
import logging
import uuid
from collections import OrderedDict
from typing import Any, Sequence

from playwright.async_api import Browser, ElementHandle, Error as PlaywrightError, Page, Playwright

from vigil.core.errors import ProtocolError
from vigil.core.result import ProtocolResult
from vigil.core.selector import LocatorStrategy
from vigil.domain.config import WebdriverConfig

logger = logging.getLogger(__name__)


def _xpath_literal(text: str) -> str:
    if '"' not in text:
        return f'"{text}"'
    if "'" not in text:
        return f"'{text}'"
    parts = text.split('"')
    return "concat(" + ", '\"', ".join(f'"{part}"' for part in parts) + ")"


def to_playwright_selector(strategy: LocatorStrategy, value: str) -> str:
    """Translate a locator strategy and value into a Playwright selector string."""
    if strategy is LocatorStrategy.CSS_SELECTOR:
        return f"css={value}"
    if strategy is LocatorStrategy.XPATH:
        return f"xpath={value}"
    if strategy is LocatorStrategy.LINK_TEXT:
        return f"xpath=//a[normalize-space(.)={_xpath_literal(value.strip())}]"
    if strategy is LocatorStrategy.PARTIAL_LINK_TEXT:
        return f"xpath=//a[contains(normalize-space(.), {_xpath_literal(value.strip())})]"
    if strategy is LocatorStrategy.TAG_NAME:
        return f"css={value}"
    if strategy is LocatorStrategy.ID:
        return f"css=[id={json.dumps(value)}]"
    if strategy is LocatorStrategy.NAME:
        return f"css=[name={json.dumps(value)}]"
    if strategy is LocatorStrategy.CLASS_NAME:
        return f"xpath=//*[contains(concat(' ', normalize-space(@class), ' '), {_xpath_literal(' ' + value + ' ')})]"
    raise ValueError(f"Unsupported locate strategy: {strategy}")


class Driver:
    """Playwright-backed protocol executor and element locator.

    Elements found through `find_elements` are kept by id so later protocol
    actions can address them. At most `max_handles` are kept; the oldest are
    disposed first, and addressing one of them afterwards is a stale reference.
    """

    MAX_HANDLES: int = 256

    def __init__(self, page: Page, browser: Browser | None = None, start_process: bool = True,
                 max_handles: int = MAX_HANDLES):
        self.page = page
        self.browser = browser
        self.start_process = start_process
        self.max_handles = max_handles
        self._elements: OrderedDict[str, ElementHandle] = OrderedDict()
        self._actions = {
            "isElementDisplayed": self._is_displayed,
            "isElementEnabled": self._is_enabled,
            "isElementSelected": self._is_selected,
            "getElementText": self._get_text,
            "getElementTagName": self._get_tag_name,
            "getElementAttribute": self._get_attribute,
            "getElementProperty": self._get_property,
            "getElementCSSValue": self._get_css_value,
        }

    @classmethod
    async def launch(cls, playwright: Playwright, config: WebdriverConfig) -> "Driver":
        browser_type = getattr(playwright, config.browser.value)
        if config.start_process:
            logger.info(f"Starting {config.browser.value} (headless={config.headless})")
            browser = await browser_type.launch(headless=config.headless)
        else:
            logger.info(f"Connecting to {config.browser.value} at {config.ws_endpoint}")
            browser = await browser_type.connect(config.ws_endpoint)
        page = await browser.new_page()
        return cls(page, browser, start_process=config.start_process)

    async def stop(self) -> None:
        self._elements.clear()
        if self.browser is not None:
            await self.browser.close()

    async def navigate(self, url: str) -> None:
        logger.debug(f"Navigating to: {url}")
        await self.page.goto(url)
        await self.page.wait_for_load_state('load')

    def capabilities(self) -> dict[str, Any]:
        """Report the running browser the way a remote end reports capabilities."""
        if self.browser is None:
            return {}
        return {
            "browserName": self.browser.browser_type.name,
            "browserVersion": self.browser.version,
        }

    # ElementLocator
    async def find_elements(self, strategy: LocatorStrategy, value: str) -> list[str]:
        selector = to_playwright_selector(strategy, value)
        try:
            handles = await self.page.query_selector_all(selector)
        except PlaywrightError as e:
            raise ProtocolError("findElements", e.message) from e

        ids = []
        for handle in handles:
            element_id = str(uuid.uuid4())
            self._elements[element_id] = handle
            ids.append(element_id)
        await self._evict_handles(keep=len(ids))
        logger.debug(f"{selector} matched {len(ids)} element(s)")
        return ids

    async def _evict_handles(self, keep: int = 0) -> None:
        # never evict the `keep` handles registered by the current lookup
        while len(self._elements) > max(self.max_handles, keep):
            _, handle = self._elements.popitem(last=False)
            try:
                await handle.dispose()
            except PlaywrightError as e:
                # already gone with its page
                logger.debug(f"Element handle dispose failed: {e.message}")

    # ProtocolActionExecutor
    async def execute_protocol_action(self, action: str, args: Sequence[Any]) -> ProtocolResult:
        handler = self._actions.get(action)
        if handler is None:
            raise ProtocolError(action, "unknown protocol action")
        if not args:
            raise ProtocolError(action, "missing element id")

        element_id, *rest = args
        handle = self._elements.get(element_id)
        if handle is None:
            raise ProtocolError(action, f"stale element reference: {element_id}")

        try:
            value = await handler(handle, *rest)
        except PlaywrightError as e:
            raise ProtocolError(action, e.message) from e
        return ProtocolResult(value=value)

    @staticmethod
    async def _is_displayed(handle: ElementHandle) -> bool:
        return await handle.is_visible()

    @staticmethod
    async def _is_enabled(handle: ElementHandle) -> bool:
        return await handle.is_enabled()

    @staticmethod
    async def _is_selected(handle: ElementHandle) -> bool:
        return await handle.evaluate("e => !!(e.checked || e.selected)")

    @staticmethod
    async def _get_text(handle: ElementHandle) -> str:
        return await handle.inner_text()

    @staticmethod
    async def _get_tag_name(handle: ElementHandle) -> str:
        return await handle.evaluate("e => e.tagName.toLowerCase()")

    @staticmethod
    async def _get_attribute(handle: ElementHandle, name: str) -> str | None:
        return await handle.get_attribute(name)

    @staticmethod
    async def _get_property(handle: ElementHandle, name: str) -> Any:
        js_handle = await handle.get_property(name)
        try:
            return await js_handle.json_value()
        finally:
            await js_handle.dispose()

    @staticmethod
    async def _get_css_value(handle: ElementHandle, name: str) -> str:
        return await handle.evaluate("(e, name) => getComputedStyle(e).getPropertyValue(name)", name)

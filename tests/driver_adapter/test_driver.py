import asyncio

import pytest

from vigil.core.errors import ProtocolError
from vigil.core.result import ProtocolResult
from vigil.core.selector import LocatorStrategy
from vigil.driver_adapter.driver import Driver, to_playwright_selector


class FakeHandle:
    def __init__(self, visible: bool = True, attributes: dict | None = None) -> None:
        self.visible = visible
        self.attributes = attributes or {}
        self.disposed = False

    async def is_visible(self) -> bool:
        return self.visible

    async def get_attribute(self, name: str):
        return self.attributes.get(name)

    async def dispose(self) -> None:
        self.disposed = True


class FakePage:
    def __init__(self, matches: dict[str, list[FakeHandle]]) -> None:
        self.matches = matches
        self.queries: list[str] = []

    async def query_selector_all(self, selector: str) -> list[FakeHandle]:
        self.queries.append(selector)
        return self.matches.get(selector, [])


class TestToPlaywrightSelector:
    """Tests for translating locate strategies to Playwright selectors."""

    @pytest.mark.parametrize(
        "strategy,value,expected",
        [
            (LocatorStrategy.CSS_SELECTOR, "#main a", "css=#main a"),
            (LocatorStrategy.XPATH, "//div", "xpath=//div"),
            (LocatorStrategy.TAG_NAME, "button", "css=button"),
            (LocatorStrategy.ID, "main", 'css=[id="main"]'),
            (LocatorStrategy.NAME, "q", 'css=[name="q"]'),
            (LocatorStrategy.LINK_TEXT, " Home ", 'xpath=//a[normalize-space(.)="Home"]'),
            (LocatorStrategy.PARTIAL_LINK_TEXT, "Ho", 'xpath=//a[contains(normalize-space(.), "Ho")]'),
            (
                LocatorStrategy.CLASS_NAME,
                "btn",
                "xpath=//*[contains(concat(' ', normalize-space(@class), ' '), \" btn \")]",
            ),
        ],
    )
    def test_mapping(self, strategy: LocatorStrategy, value: str, expected: str) -> None:
        assert to_playwright_selector(strategy, value) == expected

    def test_link_text_with_double_quotes(self) -> None:
        assert to_playwright_selector(LocatorStrategy.LINK_TEXT, 'Say "hi"') == "xpath=//a[normalize-space(.)='Say \"hi\"']"

    def test_link_text_with_both_quote_kinds(self) -> None:
        selector = to_playwright_selector(LocatorStrategy.LINK_TEXT, "it's \"x\"")

        assert selector == "xpath=//a[normalize-space(.)=concat(\"it's \", '\"', \"x\", '\"', \"\")]"


def test_find_elements_then_execute_action() -> None:
    hidden = FakeHandle(visible=False)
    shown = FakeHandle(visible=True, attributes={"href": "/home"})
    driver = Driver(FakePage({"css=a": [hidden, shown]}))

    async def _scenario():
        ids = await driver.find_elements(LocatorStrategy.CSS_SELECTOR, "a")
        first = await driver.execute_protocol_action("isElementDisplayed", [ids[0]])
        second = await driver.execute_protocol_action("isElementDisplayed", [ids[1]])
        href = await driver.execute_protocol_action("getElementAttribute", [ids[1], "href"])
        return ids, first, second, href

    ids, first, second, href = asyncio.run(_scenario())

    assert len(set(ids)) == 2
    assert first == ProtocolResult(value=False)
    assert second == ProtocolResult(value=True)
    assert href == ProtocolResult(value="/home")


@pytest.mark.parametrize(
    "action,args",
    [
        ("teleportElement", ["id"]),
        ("isElementDisplayed", []),
        ("isElementDisplayed", ["unknown-id"]),
    ],
)
def test_bad_actions_raise_protocol_error(action: str, args: list) -> None:
    driver = Driver(FakePage({}))

    with pytest.raises(ProtocolError):
        asyncio.run(driver.execute_protocol_action(action, args))


def test_capabilities_empty_without_browser() -> None:
    assert Driver(FakePage({})).capabilities() == {}


def test_repeated_lookups_keep_handle_registry_bounded() -> None:
    handles = [FakeHandle(), FakeHandle()]
    driver = Driver(FakePage({"css=li": handles}), max_handles=10)

    async def _lookups():
        return [await driver.find_elements(LocatorStrategy.CSS_SELECTOR, "li") for _ in range(50)]

    batches = asyncio.run(_lookups())

    assert len(driver._elements) == 10
    assert all(handle.disposed for handle in handles)
    latest = asyncio.run(driver.execute_protocol_action("isElementDisplayed", [batches[-1][0]]))
    assert latest == ProtocolResult(value=True)
    with pytest.raises(ProtocolError):
        asyncio.run(driver.execute_protocol_action("isElementDisplayed", [batches[0][0]]))


def test_single_lookup_larger_than_limit_is_kept_whole() -> None:
    matches = [FakeHandle() for _ in range(5)]
    driver = Driver(FakePage({"css=li": matches}), max_handles=2)

    ids = asyncio.run(driver.find_elements(LocatorStrategy.CSS_SELECTOR, "li"))

    assert len(driver._elements) == 5
    assert not any(handle.disposed for handle in matches)
    assert set(ids) == set(driver._elements)

from __future__ import annotations

from vigil.core.capabilities import BrowserName, QuirkRule
from vigil.core.command.base_element_command import BaseElementCommand
from vigil.core.result import CommandResult, ProtocolResult, invert_hidden, normalize

# Safari 12+ started by the client misreports displayedness; its "hidden" property is reliable
SAFARI_HIDDEN_PROPERTY = QuirkRule(browser_names=frozenset({BrowserName.SAFARI}), min_version=12, managed_process=True)


class IsVisible(BaseElementCommand):
    """Determine if an element is currently displayed.

    Usage:
        await session.is_visible("#main ul li a.first")
        await session.is_visible("css selector", "#main ul li a.first")
        await session.is_visible({"selector": "#main ul li a", "index": 1, "suppressNotFoundErrors": True})
        await session.is_visible({"selector": "#main ul li a.first", "timeout": 2000})
    """

    extra_args_count = 0
    quirks = ((SAFARI_HIDDEN_PROPERTY, "hidden_property_action"),)

    async def protocol_action(self) -> ProtocolResult:
        return await self.execute_protocol_action("isElementDisplayed")

    async def hidden_property_action(self) -> CommandResult:
        raw = await self.execute_protocol_action("getElementProperty", ["hidden"])
        return normalize(raw, invert_hidden)


class IsEnabled(BaseElementCommand):
    """Determine if an element is currently enabled."""

    async def protocol_action(self) -> ProtocolResult:
        return await self.execute_protocol_action("isElementEnabled")


class IsSelected(BaseElementCommand):
    """Determine if an option, checkbox or radio button is currently selected."""

    async def protocol_action(self) -> ProtocolResult:
        return await self.execute_protocol_action("isElementSelected")


class IsPresent(BaseElementCommand):
    """Determine if an element exists in the DOM.

    Looks the element up once and never fails when nothing matches; the
    result value is simply False.
    """

    requires_element = False

    async def protocol_action(self) -> ProtocolResult:
        elements = await self.find_elements()
        return ProtocolResult(status=0, value=len(elements) > self.selector.position)


class GetText(BaseElementCommand):
    """Return the visible text of an element."""

    async def protocol_action(self) -> ProtocolResult:
        return await self.execute_protocol_action("getElementText")


class GetTagName(BaseElementCommand):
    async def protocol_action(self) -> ProtocolResult:
        return await self.execute_protocol_action("getElementTagName")


class GetAttribute(BaseElementCommand):
    """Return the value of an element attribute, or None when it is not set.

    Usage:
        await session.get_attribute("#main a", "href")
    """

    extra_args_count = 1

    async def protocol_action(self) -> ProtocolResult:
        (attribute,) = self.extra_args
        return await self.execute_protocol_action("getElementAttribute", [attribute])


class GetElementProperty(BaseElementCommand):
    """Return the value of a DOM property of an element (e.g. 'value', 'hidden')."""

    extra_args_count = 1

    async def protocol_action(self) -> ProtocolResult:
        (property_name,) = self.extra_args
        return await self.execute_protocol_action("getElementProperty", [property_name])


class GetCssProperty(BaseElementCommand):
    """Return the computed value of a CSS property of an element."""

    extra_args_count = 1

    async def protocol_action(self) -> ProtocolResult:
        (css_property,) = self.extra_args
        return await self.execute_protocol_action("getElementCSSValue", [css_property])

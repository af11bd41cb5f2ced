from __future__ import annotations

import asyncio
import inspect
import logging
from abc import ABC, abstractmethod
from collections.abc import Awaitable, Callable, Sequence
from typing import TYPE_CHECKING, Any

from vigil.core.capabilities import Capabilities, QuirkRule, select_quirk
from vigil.core.errors import ElementNotFound, InvalidArgument
from vigil.core.result import CommandResult, ProtocolResult, normalize
from vigil.core.selector import SelectorDescriptor, parse_selector
from vigil.domain.config import Settings

if TYPE_CHECKING:
    from vigil.core.session import Session

logger = logging.getLogger(__name__)

Callback = Callable[[CommandResult], Any]


class BaseElementCommand(ABC):
    """Element-scoped command: resolve the selector, find the element, run one action.

    Subclasses implement `protocol_action` and may declare `quirks`, a tuple
    of (QuirkRule, method name) pairs. When a rule matches the session
    capabilities the named method runs instead of `protocol_action`, so
    exactly one of them issues the protocol call.

    A command instance serves a single invocation and is then discarded.
    """

    extra_args_count: int = 0
    requires_element: bool = True
    quirks: tuple[tuple[QuirkRule, str], ...] = ()

    def __init__(self, session: "Session") -> None:
        self.session = session
        self.selector: SelectorDescriptor | None = None
        self.extra_args: tuple[Any, ...] = ()
        self.element_id: str | None = None

    @property
    def name(self) -> str:
        return type(self).__name__

    @property
    def settings(self) -> Settings:
        return self.session.settings

    @property
    def capabilities(self) -> Capabilities | None:
        return self.session.capabilities

    @property
    def timeout_ms(self) -> int:
        if self.selector is not None and self.selector.timeout_ms is not None:
            return self.selector.timeout_ms
        return self.settings.default_timeout_ms

    @property
    def retry_interval_ms(self) -> int:
        if self.selector is not None and self.selector.retry_interval_ms is not None:
            return self.selector.retry_interval_ms
        return self.settings.retry_interval_ms

    async def execute(self, *args: Any) -> CommandResult:
        """Run the command; a trailing callable is called with the result too."""
        args, callback = self._split_callback(args)
        self.selector, self.extra_args = self._parse_args(args)

        result = await self._run()

        if callback is not None:
            outcome = callback(result)
            if inspect.isawaitable(outcome):
                await outcome
        return result

    @abstractmethod
    async def protocol_action(self) -> ProtocolResult | CommandResult:
        """Issue the command's protocol action against the resolved element."""

    async def execute_protocol_action(self, action: str, args: Sequence[Any] = ()) -> ProtocolResult:
        """Forward one action to the executor, prepending the element id when there is one."""
        call_args = list(args)
        if self.element_id is not None:
            call_args.insert(0, self.element_id)
        logger.debug(f"{self.name}: executing {action} {call_args}")
        raw = await self.session.executor.execute_protocol_action(action, call_args)
        return ProtocolResult.from_raw(raw)

    async def find_elements(self) -> list[str]:
        return await self.session.locator.find_elements(self.selector.strategy, self.selector.value)

    async def locate_element(self) -> str | None:
        """Poll the locator until the element at the requested index shows up.

        Returns None when the timeout elapses first. A timeout of 0 means a
        single attempt.
        """
        loop = asyncio.get_running_loop()
        deadline = loop.time() + self.timeout_ms / 1000
        position = self.selector.position
        interval = self.retry_interval_ms / 1000

        while True:
            elements = await self.find_elements()
            if len(elements) > position:
                return elements[position]

            remaining = deadline - loop.time()
            if remaining <= 0:
                return None
            await asyncio.sleep(min(interval, remaining))

    def select_action(self) -> Callable[[], Awaitable[ProtocolResult | CommandResult]]:
        method_name = select_quirk(self.capabilities, self.quirks)
        if method_name is None:
            return self.protocol_action
        logger.debug(f"{self.name}: using {method_name} for {self.capabilities.browser_name} {self.capabilities.version}")
        return getattr(self, method_name)

    async def _run(self) -> CommandResult:
        if self.requires_element:
            self.element_id = await self.locate_element()
            if self.element_id is None:
                if self.selector.suppress_not_found:
                    logger.debug(f"{self.name}: element {self.selector} not found, error suppressed")
                    return CommandResult.not_found()
                raise ElementNotFound(self.selector, self.timeout_ms)

        raw = await self.select_action()()
        if isinstance(raw, CommandResult):
            return raw
        return normalize(raw)

    def _parse_args(self, args: Sequence[Any]) -> tuple[SelectorDescriptor, tuple[Any, ...]]:
        count = self.extra_args_count
        if len(args) < count + 1:
            raise InvalidArgument(
                f"{self.name} expects a selector followed by {count} argument(s), got {len(args)} argument(s)"
            )
        selector_args = args[:len(args) - count]
        extra = tuple(args[len(args) - count:])
        return parse_selector(selector_args, self.settings.default_locate_strategy), extra

    @staticmethod
    def _split_callback(args: Sequence[Any]) -> tuple[tuple[Any, ...], Callback | None]:
        if args and callable(args[-1]):
            return tuple(args[:-1]), args[-1]
        return tuple(args), None

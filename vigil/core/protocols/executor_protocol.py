from __future__ import annotations

from collections.abc import Mapping, Sequence
from typing import Any, Protocol

from vigil.core.result import ProtocolResult
from vigil.core.selector import LocatorStrategy


class ProtocolActionExecutor(Protocol):
    """Issues named actions against the automation backend.

    The protocol keeps the core independent of Playwright or any wire
    format. Concrete executors (for example the Playwright-based one in
    `vigil/driver_adapter/driver.py`) implement it.
    """

    async def execute_protocol_action(self, action: str, args: Sequence[Any]) -> ProtocolResult | Mapping[str, Any]:
        """Run one protocol action and return its `{status?, value}` result.

        Element-scoped actions receive the element id as the first argument.
        Implementations raise `ProtocolError` when the backend rejects the call.
        """


class ElementLocator(Protocol):
    """Finds elements for the command core."""

    async def find_elements(self, strategy: LocatorStrategy, value: str) -> list[str]:
        """Return the ids of all elements currently matching the selector.

        An empty list means nothing matched; implementations should not wait.
        """

import logging

import pytest
from typing import Any, Sequence

from vigil.core.capabilities import Capabilities
from vigil.core.selector import LocatorStrategy
from vigil.core.session import Session
from vigil.domain.config import Settings


class _FakeExecutor:
    def __init__(self, responses: dict[str, Any] | None = None) -> None:
        # action name -> raw result mapping, or an exception to raise
        self.responses = responses or {}

        # recording
        self.calls: list[tuple[str, list[Any]]] = []

    async def execute_protocol_action(self, action: str, args: Sequence[Any]) -> Any:
        self.calls.append((action, list(args)))
        response = self.responses.get(action, {"status": 0, "value": None})
        if isinstance(response, Exception):
            raise response
        return response

    @property
    def actions(self) -> list[str]:
        return [action for action, _ in self.calls]


class _FakeLocator:
    def __init__(self, elements: dict[str, list[str]] | None = None, appear_after: int = 0) -> None:
        # selector value -> element ids
        self.elements = elements or {}
        # number of lookups returning nothing before elements show up
        self.appear_after = appear_after

        # recording
        self.lookups: list[tuple[LocatorStrategy, str]] = []

    async def find_elements(self, strategy: LocatorStrategy, value: str) -> list[str]:
        self.lookups.append((strategy, value))
        if len(self.lookups) <= self.appear_after:
            return []
        return list(self.elements.get(value, []))


@pytest.fixture
def fake_executor_factory():
    """Return a factory that constructs a configured FakeExecutor.

    Usage:
        executor = fake_executor_factory({"isElementDisplayed": {"status": 0, "value": True}})
    """

    def _factory(responses: dict[str, Any] | None = None):
        return _FakeExecutor(responses)

    return _factory


@pytest.fixture
def fake_locator_factory():
    def _factory(elements: dict[str, list[str]] | None = None, appear_after: int = 0):
        return _FakeLocator(elements, appear_after)

    return _factory


@pytest.fixture
def session_factory(fake_executor_factory, fake_locator_factory):
    """Return a factory building a Session around fake collaborators.

    Lookups are fast by default (100 ms timeout, 10 ms retry interval).
    """

    def _factory(
        responses: dict[str, Any] | None = None,
        elements: dict[str, list[str]] | None = None,
        capabilities: Capabilities | None = None,
        settings: Settings | None = None,
        appear_after: int = 0,
    ) -> Session:
        settings = settings or Settings(default_timeout_ms=100, retry_interval_ms=10)
        return Session(
            executor=fake_executor_factory(responses),
            locator=fake_locator_factory(elements, appear_after),
            settings=settings,
            capabilities=capabilities,
        )

    return _factory


@pytest.fixture
def restore_root_logger():
    """Undo configure_logging() side effects on the root logger."""
    root = logging.getLogger()
    level, handlers = root.level, list(root.handlers)
    yield
    root.setLevel(level)
    root.handlers[:] = handlers

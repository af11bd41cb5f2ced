from __future__ import annotations

import logging
from collections.abc import Awaitable, Callable, Mapping
from typing import Any

from vigil.core.capabilities import Capabilities
from vigil.core.command import COMMANDS, BaseElementCommand
from vigil.core.protocols.executor_protocol import ElementLocator, ProtocolActionExecutor
from vigil.core.result import CommandResult
from vigil.domain.config import Settings

logger = logging.getLogger(__name__)


class Session:
    """Shared state commands run against: collaborators, settings and capabilities.

    Registered commands are reachable as attributes, e.g.
    `await session.is_visible("#main")`. Every call builds a fresh command
    instance, so any number of commands may be in flight at once.
    """

    def __init__(
        self,
        executor: ProtocolActionExecutor,
        locator: ElementLocator,
        settings: Settings | None = None,
        capabilities: Capabilities | None = None,
        commands: Mapping[str, type[BaseElementCommand]] | None = None,
    ) -> None:
        self.executor = executor
        self.locator = locator
        self.settings = settings or Settings()
        self.capabilities = capabilities
        self.commands: dict[str, type[BaseElementCommand]] = dict(COMMANDS if commands is None else commands)

    @classmethod
    def from_raw_capabilities(
        cls,
        executor: ProtocolActionExecutor,
        locator: ElementLocator,
        raw_capabilities: Mapping[str, Any] | None,
        settings: Settings | None = None,
    ) -> "Session":
        """Build a session, normalizing the capabilities the backend reported."""
        settings = settings or Settings()
        capabilities = None
        if raw_capabilities is not None:
            capabilities = Capabilities.from_mapping(
                raw_capabilities, uses_managed_process=settings.webdriver.start_process
            )
        return cls(executor, locator, settings=settings, capabilities=capabilities)

    def register(self, name: str, command_class: type[BaseElementCommand]) -> None:
        self.commands[name] = command_class

    def command(self, name: str) -> Callable[..., Awaitable[CommandResult]]:
        """Return an async callable running the named command.

        Raises KeyError for unknown names.
        """
        command_class = self.commands[name]

        async def _invoke(*args: Any) -> CommandResult:
            logger.debug(f"Running {name} with {args}")
            return await command_class(self).execute(*args)

        _invoke.__name__ = name
        return _invoke

    def __getattr__(self, name: str) -> Callable[..., Awaitable[CommandResult]]:
        commands = self.__dict__.get("commands", {})
        if name in commands:
            return self.command(name)
        raise AttributeError(f"{type(self).__name__!r} object has no attribute {name!r}")

from __future__ import annotations

from collections.abc import Mapping, Sequence
from dataclasses import dataclass
from enum import Enum
from typing import Any

from vigil.core.errors import InvalidArgument


class LocatorStrategy(Enum):
    CSS_SELECTOR = "css selector"
    XPATH = "xpath"
    LINK_TEXT = "link text"
    PARTIAL_LINK_TEXT = "partial link text"
    TAG_NAME = "tag name"
    ID = "id"
    NAME = "name"
    CLASS_NAME = "class name"

    @classmethod
    def from_name(cls, name: Any) -> "LocatorStrategy":
        """Resolve a strategy from its protocol name or a common alias.

        Matching is case-insensitive and treats '-' and '_' as spaces, so
        'css', 'CSS Selector' and 'link_text' are all accepted.
        """
        if isinstance(name, LocatorStrategy):
            return name
        if not isinstance(name, str):
            raise InvalidArgument(f"Locate strategy must be a string, got: {name!r}")

        key = " ".join(name.strip().lower().replace("-", " ").replace("_", " ").split())
        strategy = _ALIASES.get(key)
        if strategy is None:
            try:
                strategy = cls(key)
            except ValueError:
                raise InvalidArgument(f"Unknown locate strategy: {name!r}") from None
        return strategy


_ALIASES = {
    "css": LocatorStrategy.CSS_SELECTOR,
    "linktext": LocatorStrategy.LINK_TEXT,
    "partial link": LocatorStrategy.PARTIAL_LINK_TEXT,
    "tag": LocatorStrategy.TAG_NAME,
    "class": LocatorStrategy.CLASS_NAME,
}


@dataclass(frozen=True)
class SelectorDescriptor:
    """Canonical form of every selector call shape a command accepts."""
    strategy: LocatorStrategy
    value: str
    index: int | None = None
    timeout_ms: int | None = None
    retry_interval_ms: int | None = None
    suppress_not_found: bool = False

    def __post_init__(self):
        if not isinstance(self.value, str) or not self.value:
            raise InvalidArgument("Selector value must be a non-empty string")
        if self.index is not None and self.index < 0:
            raise InvalidArgument(f"Selector index must be >= 0, got: {self.index}")

    @property
    def position(self) -> int:
        return self.index or 0

    def __str__(self) -> str:
        text = f'"{self.value}"'
        if self.strategy is not LocatorStrategy.CSS_SELECTOR:
            text = f"{text} ({self.strategy.value})"
        if self.index is not None:
            text = f"{text}[{self.index}]"
        return text


def _optional_int(options: Mapping[str, Any], key: str) -> int | None:
    value = options.get(key)
    if value is None:
        return None
    if isinstance(value, bool) or not isinstance(value, int):
        raise InvalidArgument(f"Selector option {key!r} must be an integer, got: {value!r}")
    if value < 0:
        raise InvalidArgument(f"Selector option {key!r} must be >= 0, got: {value}")
    return value


def _from_object(options: Mapping[str, Any], default_strategy: LocatorStrategy) -> SelectorDescriptor:
    value = options.get("selector")
    if not isinstance(value, str) or not value:
        raise InvalidArgument("Selector object must carry a non-empty 'selector' string")

    strategy = default_strategy
    if options.get("locateStrategy") is not None:
        strategy = LocatorStrategy.from_name(options["locateStrategy"])

    return SelectorDescriptor(
        strategy=strategy,
        value=value,
        index=_optional_int(options, "index"),
        timeout_ms=_optional_int(options, "timeout"),
        retry_interval_ms=_optional_int(options, "retryInterval"),
        suppress_not_found=bool(options.get("suppressNotFoundErrors", False)),
    )


def parse_selector(args: Sequence[Any], default_strategy: LocatorStrategy = LocatorStrategy.CSS_SELECTOR) -> SelectorDescriptor:
    """Turn the selector part of a command call into a SelectorDescriptor.

    Accepted shapes, in priority order:
    1. (using, selector): explicit strategy
    2. (selector,): session default strategy
    3. (selector_object,): mapping with 'selector' and optional
       'index', 'timeout', 'retryInterval', 'suppressNotFoundErrors', 'locateStrategy'

    Raises InvalidArgument for anything else.
    """
    if len(args) == 2:
        using, value = args
        if not isinstance(value, str) or not value:
            raise InvalidArgument(f"Selector must be a non-empty string, got: {value!r}")
        return SelectorDescriptor(strategy=LocatorStrategy.from_name(using), value=value)

    if len(args) == 1:
        (selector,) = args
        if isinstance(selector, SelectorDescriptor):
            return selector
        if isinstance(selector, str):
            if not selector:
                raise InvalidArgument("Selector must be a non-empty string")
            return SelectorDescriptor(strategy=default_strategy, value=selector)
        if isinstance(selector, Mapping):
            return _from_object(selector, default_strategy)
        raise InvalidArgument(f"Selector must be a string or an object, got: {selector!r}")

    raise InvalidArgument(f"Expected a selector or a (using, selector) pair, got {len(args)} arguments")

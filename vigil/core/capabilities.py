from __future__ import annotations

import logging
import re
from collections.abc import Iterable, Mapping
from dataclasses import dataclass
from typing import Any, TypeVar

from vigil.core.errors import UnsupportedCapability

logger = logging.getLogger(__name__)

T = TypeVar("T")

_LEADING_INT = re.compile(r"^\s*([+-]?[0-9]+)")


class BrowserName:
    SAFARI = "safari"


def parse_major_version(version: Any) -> int | None:
    """Return the leading integer of a version string, or None if there is none.

    "13.1.2" -> 13, "12abc" -> 12, "abc" -> None, None -> None.
    """
    if version is None or isinstance(version, bool):
        return None
    if isinstance(version, int):
        return version
    match = _LEADING_INT.match(str(version))
    if match is None:
        return None
    return int(match.group(1))


@dataclass(frozen=True)
class Capabilities:
    """Read-only snapshot of what the session reported about its browser.

    `legacy_version` comes from the old "version" capability and
    `browser_version` from the modern "browserVersion" one. Both are kept
    as reported; `version` is the single normalized value.
    """
    browser_name: str | None = None
    browser_version: str | None = None
    legacy_version: str | None = None
    uses_managed_process: bool = False

    @classmethod
    def from_mapping(cls, raw: Mapping[str, Any], uses_managed_process: bool = False) -> "Capabilities":
        def _text(key: str) -> str | None:
            value = raw.get(key)
            return None if value is None else str(value)

        return cls(
            browser_name=_text("browserName"),
            browser_version=_text("browserVersion"),
            # a falsy "version" (0, "", False) counts as unset
            legacy_version=_text("version") if raw.get("version") else None,
            uses_managed_process=bool(uses_managed_process),
        )

    @property
    def version(self) -> str | None:
        # legacy "version" wins whenever it is set to something non-empty
        return self.legacy_version or self.browser_version

    @property
    def major_version(self) -> int | None:
        return parse_major_version(self.version)

    def require_browser_name(self) -> str:
        if not self.browser_name:
            raise UnsupportedCapability("capabilities do not report a browserName")
        return self.browser_name


@dataclass(frozen=True)
class QuirkRule:
    """A browser/version/environment predicate that selects an alternate action.

    `managed_process` is True when the quirk only applies to browsers started
    by the client, False when it only applies to remote or already running
    ones, and None when the environment does not matter.
    """
    browser_names: frozenset[str]
    min_version: int
    managed_process: bool | None = True

    def __post_init__(self):
        names = self.browser_names
        if isinstance(names, str):
            names = (names,)
        object.__setattr__(self, "browser_names", frozenset(name.lower() for name in names))


def applies_quirk(capabilities: Capabilities | None, rule: QuirkRule) -> bool:
    """Return True when `rule` matches the session's capabilities.

    Missing capabilities, a missing browser name and an absent or
    unparseable version all mean the quirk does not apply. Falling back
    to the standard action for an unknown version is a heuristic: it
    assumes the browser behaves like a modern one.
    """
    if capabilities is None:
        return False

    try:
        browser_name = capabilities.require_browser_name()
    except UnsupportedCapability as exc:
        logger.debug(f"Quirk check skipped: {exc}")
        return False

    if browser_name.lower() not in rule.browser_names:
        return False

    major_version = capabilities.major_version
    if major_version is None or major_version < rule.min_version:
        return False

    if rule.managed_process is not None and capabilities.uses_managed_process != rule.managed_process:
        return False

    return True


def select_quirk(capabilities: Capabilities | None, quirks: Iterable[tuple[QuirkRule, T]]) -> T | None:
    """Return the payload of the first rule that applies, or None."""
    for rule, payload in quirks:
        if applies_quirk(capabilities, rule):
            return payload
    return None

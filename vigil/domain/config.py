from dataclasses import dataclass, field
from enum import Enum

from vigil.core.selector import LocatorStrategy


class BrowserType(Enum):
    CHROMIUM = "chromium"
    FIREFOX = "firefox"
    WEBKIT = "webkit"


@dataclass(frozen=True)
class WebdriverConfig:
    """Configuration for the browser process."""
    start_process: bool = True  # False attaches to a running browser at ws_endpoint
    browser: BrowserType = BrowserType.CHROMIUM
    headless: bool = True
    ws_endpoint: str | None = None

    def __post_init__(self):
        if not self.start_process and not self.ws_endpoint:
            raise ValueError("ws_endpoint is required when start_process is false")


@dataclass(frozen=True)
class Settings:
    """Session settings read by every command."""
    log_level: str = "INFO"
    default_timeout_ms: int = 5000
    retry_interval_ms: int = 500
    default_locate_strategy: LocatorStrategy = LocatorStrategy.CSS_SELECTOR
    webdriver: WebdriverConfig = field(default_factory=WebdriverConfig)

    def __post_init__(self):
        for name in ("default_timeout_ms", "retry_interval_ms"):
            value = getattr(self, name)
            if value < 0:
                raise ValueError(f"{name} must be >= 0, got: {value}")

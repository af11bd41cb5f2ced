import os
import re
from pathlib import Path
from typing import Any, Iterator, Optional

import yaml
from dotenv import load_dotenv

from vigil.core.errors import ConfigurationError, InvalidArgument
from vigil.core.selector import LocatorStrategy
from vigil.domain.config import BrowserType, Settings, WebdriverConfig

CONFIG_FILENAME = "config.yaml"
CONFIG_PATH_ENV = "CONFIG_PATH"

_ENV_TOKEN = re.compile(r'\$\{(\w+)}')
_TRUE_WORDS = frozenset({"1", "true", "yes", "on"})


def _search_locations() -> Iterator[Path]:
    """Yield config.yaml candidates: cwd and its parents, then the source tree root."""
    cwd = Path.cwd()
    for directory in (cwd, *cwd.parents):
        yield directory / CONFIG_FILENAME
    yield Path(__file__).resolve().parents[2] / CONFIG_FILENAME


def find_config_path() -> str:
    """Locate the settings file.

    CONFIG_PATH wins when set and must then point at an existing file.
    Otherwise the first config.yaml found by `_search_locations` is used.

    Raises FileNotFoundError if no config file is found.
    """
    explicit = os.getenv(CONFIG_PATH_ENV)
    if explicit:
        if not Path(explicit).is_file():
            raise FileNotFoundError(f"{CONFIG_PATH_ENV} is set but file not found: {explicit}")
        return explicit

    found = next((candidate for candidate in _search_locations() if candidate.is_file()), None)
    if found is None:
        raise FileNotFoundError(
            f"{CONFIG_FILENAME} not found. Set {CONFIG_PATH_ENV} or pass --config to point at a settings file."
        )
    return str(found)


def load(config_path: Optional[str] = None) -> Settings:
    """Read settings from `config_path`, or from the discovered config.yaml.

    `${VAR}` tokens are replaced from the environment (a `.env` file is loaded
    first); unknown tokens are left untouched. An empty file yields defaults.
    """
    load_dotenv()
    if config_path and not Path(config_path).is_file():
        raise FileNotFoundError(f"Config file not found: {config_path}")
    source = Path(config_path or find_config_path())

    data = _parse_yaml(source)
    if not isinstance(data, dict):
        raise ConfigurationError(f"Parsed config file {source} does not contain a mapping")
    return _to_settings(data)


def _parse_yaml(source: Path) -> Any:
    text = _ENV_TOKEN.sub(lambda m: os.getenv(m.group(1), m.group(0)), source.read_text())
    try:
        data = yaml.safe_load(text)
    except yaml.YAMLError as e:
        raise ConfigurationError(f"Invalid YAML in {source}: {e}") from e
    return {} if data is None else data


def _flag(value: Any) -> bool:
    # substituted env values arrive as strings such as "false"
    if isinstance(value, str):
        return value.strip().lower() in _TRUE_WORDS
    return bool(value)


def _to_settings(data: dict) -> Settings:
    section = data.get('webdriver') or {}
    if not isinstance(section, dict):
        raise ConfigurationError("'webdriver' section must be a mapping")

    try:
        webdriver = WebdriverConfig(
            start_process=_flag(section.get('start_process', True)),
            browser=BrowserType(str(section.get('browser', BrowserType.CHROMIUM.value)).lower()),
            headless=_flag(section.get('headless', True)),
            ws_endpoint=section.get('ws_endpoint') or None,
        )
        defaults = Settings()
        return Settings(
            log_level=str(data.get('log_level', defaults.log_level)),
            default_timeout_ms=int(data.get('default_timeout_ms', defaults.default_timeout_ms)),
            retry_interval_ms=int(data.get('retry_interval_ms', defaults.retry_interval_ms)),
            default_locate_strategy=LocatorStrategy.from_name(
                data.get('default_locate_strategy', defaults.default_locate_strategy)
            ),
            webdriver=webdriver,
        )
    except (InvalidArgument, TypeError, ValueError) as e:
        raise ConfigurationError(f"Invalid configuration: {e}") from e

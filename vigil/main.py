import argparse
import asyncio
import json
import os
import sys
from typing import Optional, Sequence

from vigil.config.logging_config import configure_logging, get_logger
from vigil.core.errors import VigilError
from vigil.domain.config import Settings
from vigil.infrastructure.config_loader import load

logger = get_logger(__name__)


def setup_env(config_path: Optional[str] = None) -> Settings:
    """Load configuration and configure logging."""
    settings = load(config_path)
    configure_logging(os.getenv("LOG_LEVEL", settings.log_level))
    return settings


def _parse_args(argv: Optional[Sequence[str]] = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(prog="vigil", description="Run one element command against a web page")
    parser.add_argument("url", help="Page to open")
    parser.add_argument("command", help="Command name, e.g. is_visible or get_attribute")
    parser.add_argument("selector", help="Element selector")
    parser.add_argument("extra", nargs="*", help="Extra command arguments, e.g. an attribute name")
    parser.add_argument("--using", help="Locate strategy, e.g. 'xpath' (defaults to the configured one)")
    parser.add_argument("--index", type=int, help="0-based index among the matching elements")
    parser.add_argument("--timeout", type=int, help="Element lookup timeout in milliseconds")
    parser.add_argument("--suppress-not-found", action="store_true", help="Report a missing element as status -1")
    parser.add_argument("--config", help="Path to config.yaml")
    return parser.parse_args(argv)


def build_selector(args: argparse.Namespace) -> dict:
    selector: dict = {"selector": args.selector}
    if args.using:
        selector["locateStrategy"] = args.using
    if args.index is not None:
        selector["index"] = args.index
    if args.timeout is not None:
        selector["timeout"] = args.timeout
    if args.suppress_not_found:
        selector["suppressNotFoundErrors"] = True
    return selector


async def run(args: argparse.Namespace, settings: Settings) -> dict:
    # Heavy imports stay local so the CLI starts fast on argument errors
    from playwright.async_api import async_playwright
    from vigil.core.session import Session
    from vigil.driver_adapter.driver import Driver

    async with async_playwright() as playwright:
        driver = await Driver.launch(playwright, settings.webdriver)
        try:
            await driver.navigate(args.url)
            session = Session.from_raw_capabilities(driver, driver, driver.capabilities(), settings=settings)
            result = await session.command(args.command)(build_selector(args), *args.extra)
            return result.to_dict()
        finally:
            # Ensure the browser is closed even on error
            await driver.stop()


def main(argv: Optional[Sequence[str]] = None) -> int:
    args = _parse_args(argv)
    settings = setup_env(args.config)

    from vigil.core.command import COMMANDS
    if args.command not in COMMANDS:
        logger.error(f"Unknown command: {args.command}. Available: {', '.join(sorted(COMMANDS))}")
        return 2

    try:
        result = asyncio.run(run(args, settings))
    except VigilError as e:
        logger.error(str(e))
        return 1

    print(json.dumps(result, default=str))
    return 0


if __name__ == "__main__":
    sys.exit(main())

"""Entry point for the terminal dashboard."""

import asyncio
import logging
import sys

from blessed import Terminal
from loguru import logger
from rich.console import Console
from rich.traceback import install

from sysdash import settings
from sysdash.coordinator import Coordinator
from sysdash.dashboard import SystemDashboard
from sysdash.pollers import build_pollers


def _configure_logging() -> None:
    """Keep log output off the terminal the dashboard draws on."""
    logger.remove()
    if settings.LOG_FILE:
        logger.add(settings.LOG_FILE, level=settings.LOG_LEVEL, rotation="10 MB", retention=3, enqueue=True)
    else:
        logger.add(lambda message: None)
    logging.disable(logging.CRITICAL)
    logging.captureWarnings(False)


def main() -> None:
    """Run the dashboard until the user quits."""
    _configure_logging()
    console = Console()
    install(console=console, show_locals=False)

    try:
        terminal = Terminal()
        coordinator = Coordinator(build_pollers())
        dashboard = SystemDashboard(coordinator, console=console, terminal=terminal)
        asyncio.run(dashboard.run())
    except KeyboardInterrupt:
        pass
    except Exception:
        logger.exception("Dashboard terminated unexpectedly")
        console.print("[red]Alas, there's been an error. Set SYSDASH_LOG_FILE for details.[/]")
        sys.exit(1)


if __name__ == "__main__":
    main()

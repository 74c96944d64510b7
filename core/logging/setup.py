"""Root logger setup for job runs."""

import logging
import sys
from pathlib import Path

from core.logging.handlers import FirstPartyFilter, ModuleDispatchHandler, ThirdPartyHandler

LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"

# Handlers installed by install_handlers(), replaced on repeated calls
_installed: list[logging.Handler] = []


def install_handlers(
    log_dir: Path,
    level: int = logging.INFO,
    console: bool = True,
) -> list[logging.Handler]:
    """Attach console and per-module file handlers to the root logger.

    Calling again replaces the handlers from the previous call.

    Args:
        log_dir: Directory for the per-module and run-3p log files
        level: Root logger level
        console: Also log first-party records to stderr

    Returns:
        The installed handlers
    """
    remove_handlers()

    formatter = logging.Formatter(LOG_FORMAT)
    handlers: list[logging.Handler] = []

    module_handler = ModuleDispatchHandler(log_dir)
    module_handler.addFilter(FirstPartyFilter(first_party=True))
    handlers.append(module_handler)

    third_party_handler = ThirdPartyHandler(log_dir)
    third_party_handler.addFilter(FirstPartyFilter(first_party=False))
    handlers.append(third_party_handler)

    if console:
        console_handler = logging.StreamHandler(sys.stderr)
        console_handler.addFilter(FirstPartyFilter(first_party=True))
        handlers.append(console_handler)

    root = logging.getLogger()
    root.setLevel(level)
    for handler in handlers:
        handler.setFormatter(formatter)
        root.addHandler(handler)

    _installed.extend(handlers)
    return handlers


def remove_handlers() -> None:
    """Detach and close handlers installed by install_handlers()."""
    root = logging.getLogger()
    for handler in _installed:
        root.removeHandler(handler)
        handler.close()
    _installed.clear()

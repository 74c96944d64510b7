"""Per-module log files, rotated once per job run.

Records from this project's packages go to one file per package group
(``enrichment.log``, ``task-queue.log``, ...); records from libraries go to
``run-3p.log``. The first record a file receives within a run moves the old
file to ``*.previous.log``.

Usage:
    from core.logging import install_handlers, logging_run

    install_handlers(Path("logs"))
    with logging_run("detect-breadcrumbs"):
        ...

Modules keep logging through ``logging.getLogger(__name__)``.
"""

from core.logging.handlers import (
    FirstPartyFilter,
    ModuleDispatchHandler,
    ThirdPartyHandler,
    is_first_party,
)
from core.logging.run_manager import (
    MODULE_TO_LOG,
    end_run,
    get_current_run_id,
    logging_run,
    module_to_log_name,
    start_run,
)
from core.logging.setup import install_handlers, remove_handlers

__all__ = [
    # Runs
    "start_run",
    "end_run",
    "logging_run",
    "get_current_run_id",
    # Handlers
    "install_handlers",
    "remove_handlers",
    "ModuleDispatchHandler",
    "ThirdPartyHandler",
    "FirstPartyFilter",
    "is_first_party",
    # Routing
    "module_to_log_name",
    "MODULE_TO_LOG",
]

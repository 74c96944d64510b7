"""Handlers writing one log file per package group.

ModuleDispatchHandler picks the file from the record's logger name via
MODULE_TO_LOG. ThirdPartyHandler is the same handler pinned to a single
``run-3p.log`` for library loggers (httpx, elasticsearch, urllib3).

Writes are synchronous; a job logs a few lines per task, so the event loop
is never blocked for long.
"""

import logging
from pathlib import Path
from typing import TextIO

from core.logging.run_manager import module_to_log_name, should_rotate

FIRST_PARTY_PREFIXES = ("core", "jobs", "testing")


def is_first_party(logger_name: str) -> bool:
    """Whether a logger belongs to one of this project's packages."""
    return logger_name.split(".", 1)[0] in FIRST_PARTY_PREFIXES


class FirstPartyFilter(logging.Filter):
    """Pass only records from this project's loggers (or only the others)."""

    def __init__(self, first_party: bool = True):
        super().__init__()
        self.first_party = first_party

    def filter(self, record: logging.LogRecord) -> bool:
        return is_first_party(record.name) == self.first_party


def _rotate_log_file(log_dir: Path, log_name: str) -> None:
    """Replace ``{name}.previous.log`` with the current ``{name}.log``."""
    current = log_dir / f"{log_name}.log"
    if current.exists():
        current.replace(log_dir / f"{log_name}.previous.log")


class ModuleDispatchHandler(logging.Handler):
    """Route each record to the log file of its package group.

    One stream per log file is opened on first use and kept until close().
    The first record for a file within a run rotates the file.

    Usage:
        handler = ModuleDispatchHandler(Path("logs"))
        handler.setFormatter(logging.Formatter("%(asctime)s - %(message)s"))
        logging.getLogger().addHandler(handler)
    """

    def __init__(self, log_dir: Path):
        super().__init__()
        self.log_dir = Path(log_dir)
        self._streams: dict[str, TextIO] = {}

    def log_name_for(self, record: logging.LogRecord) -> str:
        return module_to_log_name(record.name)

    def emit(self, record: logging.LogRecord) -> None:
        try:
            log_name = self.log_name_for(record)
            if should_rotate(log_name):
                self._close_stream(log_name)
                self.log_dir.mkdir(parents=True, exist_ok=True)
                _rotate_log_file(self.log_dir, log_name)

            stream = self._stream(log_name)
            stream.write(self.format(record) + "\n")
            stream.flush()
        except Exception:
            self.handleError(record)

    def _stream(self, log_name: str) -> TextIO:
        stream = self._streams.get(log_name)
        if stream is None:
            self.log_dir.mkdir(parents=True, exist_ok=True)
            stream = self._streams[log_name] = open(
                self.log_dir / f"{log_name}.log", "a", encoding="utf-8"
            )
        return stream

    def _close_stream(self, log_name: str) -> None:
        stream = self._streams.pop(log_name, None)
        if stream is not None:
            stream.close()

    def close(self) -> None:
        """Close every open log file."""
        self.acquire()
        try:
            for log_name in list(self._streams):
                try:
                    self._close_stream(log_name)
                except OSError as e:
                    logging.getLogger(__name__).debug(f"Closing {log_name}.log failed: {e}")
        finally:
            self.release()
        super().close()


class ThirdPartyHandler(ModuleDispatchHandler):
    """Single run-3p.log for library loggers, rotated per run."""

    LOG_NAME = "run-3p"

    def log_name_for(self, record: logging.LogRecord) -> str:
        return self.LOG_NAME

from __future__ import annotations

import json
import logging
import sys
from dataclasses import dataclass, asdict
from pathlib import Path
from typing import Iterable


APP_LOGGER = "fusionsolar"


def _default_logger_name() -> logging.Logger:
    return logging.getLogger(APP_LOGGER)


class ConsoleLog:
    """Configure console logging for the application."""

    def __init__(self, level: str = "INFO", quiet: bool = False, debug_modules: Iterable[str] | None = None):
        self.level = level.upper()
        self.quiet = quiet
        self.debug_modules = list(debug_modules or [])

    def setup(self) -> logging.Logger:
        # Root logger handles all levels; handlers control visibility.
        root = logging.getLogger()
        root.handlers.clear()
        root.setLevel(logging.DEBUG)

        if not self.quiet:
            handler = logging.StreamHandler(sys.stdout)
            handler.setLevel(getattr(logging, self.level, logging.INFO))
            fmt = "%(asctime)s %(levelname)s [%(name)s] %(message)s"
            handler.setFormatter(logging.Formatter(fmt, datefmt="%Y-%m-%d %H:%M:%S"))
            root.addHandler(handler)

        # urllib3 logs every connection at DEBUG; only show it when asked.
        if "urllib3" not in self.debug_modules:
            logging.getLogger("urllib3").setLevel(logging.INFO)
        for name in self.debug_modules:
            logging.getLogger(name).setLevel(logging.DEBUG)

        return _default_logger_name()


@dataclass
class CollectionLogEntry:
    timestamp: str
    trigger: str                    # "metrics", "collect" or "dump-devices"
    outcome: str                    # "ok" or "error"
    duration_s: float
    stations: int | None = None
    station_kpis: int | None = None
    device_readings: int | None = None
    device_types: list[int] | None = None
    skipped: list[str] | None = None
    error_kind: str | None = None
    error_detail: str | None = None


class StructuredLog:
    """Append-only JSONL trace of collection cycles."""

    def __init__(self, path: str | None, enabled: bool = False):
        self.enabled = enabled and bool(path)
        self.path = Path(path).expanduser() if path else None
        if self.enabled and self.path:
            self.path.parent.mkdir(parents=True, exist_ok=True)

    def write(self, entry: CollectionLogEntry) -> None:
        if not self.enabled or not self.path:
            return
        payload = asdict(entry)
        try:
            with self.path.open("a", encoding="utf-8") as fh:
                fh.write(json.dumps(payload) + "\n")
        except OSError as exc:  # pragma: no cover - best-effort logging
            logging.getLogger(__name__).debug("Structured log write skipped: %s", exc)


def get_logger(name: str) -> logging.Logger:
    """Child of the application logger, so console settings apply to it."""
    return logging.getLogger(f"{APP_LOGGER}.{name}")

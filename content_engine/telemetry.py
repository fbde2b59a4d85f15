"""Logging setup and the pipeline telemetry port"""

import logging
from abc import ABC, abstractmethod
from datetime import datetime
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, Field

logger = logging.getLogger(__name__)

# Orchestrator log levels
PHASE = "PHASE"
AGENT = "AGENT"
INFO = "INFO"
WARN = "WARN"
ERROR = "ERROR"

_STDLIB_LEVELS = {
    PHASE: logging.INFO,
    AGENT: logging.INFO,
    INFO: logging.INFO,
    WARN: logging.WARNING,
    ERROR: logging.ERROR,
}


def configure_logging(level: str = "INFO", fmt: Optional[str] = None) -> None:
    """Configure root logging once for the process"""
    logging.basicConfig(
        level=getattr(logging, level.upper(), logging.INFO),
        format=fmt or "%(asctime)s %(levelname)s [%(name)s] %(message)s",
    )


class LogEntry(BaseModel):
    """One append-only telemetry record, keyed by run id"""
    run_id: str
    timestamp: datetime = Field(default_factory=datetime.now)
    level: str
    source: str
    message: str
    metadata: Dict[str, Any] = Field(default_factory=dict)

    def format(self) -> str:
        return f"[{self.level}] {self.source}: {self.message}"


class TelemetrySink(ABC):
    """Abstract base class for telemetry destinations"""

    @abstractmethod
    async def emit(self, entry: LogEntry) -> None:
        """
        Record a log entry.

        Args:
            entry: Entry to record
        """
        pass


class LoggingSink(TelemetrySink):
    """Forwards entries to the standard logging module"""

    def __init__(self, name: str = "content_engine.pipeline"):
        self.logger = logging.getLogger(name)

    async def emit(self, entry: LogEntry) -> None:
        self.logger.log(
            _STDLIB_LEVELS.get(entry.level, logging.INFO),
            f"[{entry.run_id[:8]}] {entry.format()}",
        )


class MemorySink(TelemetrySink):
    """Keeps entries in memory"""

    def __init__(self):
        self.entries: List[LogEntry] = []

    async def emit(self, entry: LogEntry) -> None:
        self.entries.append(entry)

    def for_run(self, run_id: str) -> List[LogEntry]:
        return [e for e in self.entries if e.run_id == run_id]

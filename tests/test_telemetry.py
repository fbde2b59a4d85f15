"""Tests for telemetry sinks."""

from __future__ import annotations

import logging

import pytest

from content_engine.telemetry import AGENT, ERROR, WARN, LogEntry, LoggingSink, MemorySink


@pytest.mark.unit
class TestLogEntry:
    """Test entry formatting."""

    def test_format(self) -> None:
        """Formatted as [LEVEL] source: message."""
        entry = LogEntry(run_id="r1", level=AGENT, source="judge", message="complete")

        assert entry.format() == "[AGENT] judge: complete"


@pytest.mark.unit
class TestSinks:
    """Test the bundled sinks."""

    async def test_memory_sink_filters_by_run(self) -> None:
        """for_run returns only that run's entries."""
        sink = MemorySink()
        await sink.emit(LogEntry(run_id="a", level=AGENT, source="x", message="1"))
        await sink.emit(LogEntry(run_id="b", level=AGENT, source="x", message="2"))

        assert [e.message for e in sink.for_run("a")] == ["1"]

    @pytest.mark.parametrize(("level", "expected"), [(AGENT, logging.INFO), (WARN, logging.WARNING), (ERROR, logging.ERROR)])
    async def test_logging_sink_maps_levels(self, level: str, expected: int, caplog: pytest.LogCaptureFixture) -> None:
        """Pipeline levels map onto stdlib levels."""
        caplog.set_level(logging.DEBUG, logger="content_engine.pipeline")

        await LoggingSink().emit(LogEntry(run_id="0123456789", level=level, source="judge", message="m"))

        [record] = caplog.records
        assert record.levelno == expected
        assert record.getMessage() == f"[01234567] [{level}] judge: m"

"""Tests for the shared structlog / standard library logging pipeline."""

import json
import logging

import pytest
import structlog

from readwise_mcp.config.loader import Settings
from readwise_mcp.mcp.bridge import ToolBridge
from readwise_mcp.utils.logging import build_formatter, set_request_id, setup_logging


class FailingExecutor:
    async def execute(self, name, arguments):
        raise RuntimeError(f"upstream exploded for {name}")


class TestStdlibRecords:
    """Module loggers are rendered by the structlog formatter."""

    @pytest.mark.asyncio
    async def test_bridge_failure_log_carries_request_id(self, caplog):
        set_request_id("req-42")
        with caplog.at_level(logging.ERROR, logger="readwise_mcp.mcp.bridge"):
            await ToolBridge(FailingExecutor()).invoke("X", {})

        record = next(r for r in caplog.records if r.name == "readwise_mcp.mcp.bridge")
        line = json.loads(build_formatter("json").format(record))

        assert line["request_id"] == "req-42"
        assert line["level"] == "error"
        assert line["event"] == "Error executing tool X"
        assert "upstream exploded for X" in line["exception"]

    def test_record_without_request_id(self):
        set_request_id("")
        record = logging.LogRecord(
            "readwise_mcp.security.auth", logging.WARNING, __file__, 1,
            "Missing API key", None, None,
        )

        line = json.loads(build_formatter("json").format(record))

        assert line["event"] == "Missing API key"
        assert line["level"] == "warning"
        assert "request_id" not in line
        assert "timestamp" in line


class TestSetupLogging:
    """Tests for handler installation."""

    def test_repeated_setup_installs_one_handler(self):
        settings = Settings(_env_file=None, readwise_token="t", log_level="DEBUG")
        root = logging.getLogger()
        previous_level = root.level

        setup_logging(settings)
        setup_logging(settings)

        ours = [
            h for h in root.handlers
            if isinstance(h.formatter, structlog.stdlib.ProcessorFormatter)
        ]
        assert len(ours) == 1
        assert root.level == logging.DEBUG
        root.setLevel(previous_level)

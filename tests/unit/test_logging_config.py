"""
Named log files, trace ids and level handling.
"""

import pytest

from paperlens.utils.logging_config import (
    LogFiles,
    Logger,
    clear_trace_id,
    get_trace_id,
    set_trace_id,
)


@pytest.fixture
def log_dir(tmp_path, monkeypatch):
    Logger.close()
    monkeypatch.setenv("PAPERLENS_LOG_DIR", str(tmp_path))
    monkeypatch.setenv("PAPERLENS_LOG_LEVEL", "INFO")
    yield tmp_path
    Logger.close()
    clear_trace_id()


class TestLogFiles:
    def test_named_files_from_yaml(self):
        assert LogFiles.SEARCH == "search/search.log"
        assert LogFiles.ERROR == "errors/error.log"

    def test_unknown_name(self):
        with pytest.raises(AttributeError):
            LogFiles.NOT_CONFIGURED
        assert LogFiles.get("custom") == "custom/custom.log"


class TestTraceId:
    def test_generated_and_explicit(self):
        generated = set_trace_id()
        assert generated.startswith("req-")
        assert get_trace_id() == generated

        assert set_trace_id("req-fixed") == "req-fixed"
        clear_trace_id()
        assert get_trace_id() is None


class TestLogger:
    def test_writes_to_named_file_with_trace_id(self, log_dir):
        set_trace_id("req-abc123")
        Logger.info("search query=graph", file=LogFiles.SEARCH)
        Logger.close()

        content = (log_dir / "search" / "search.log").read_text(encoding="utf-8")
        assert "[INFO] [req-abc123]" in content
        assert "search query=graph" in content
        assert "test_logging_config.py" in content

    def test_default_file_and_missing_trace(self, log_dir):
        clear_trace_id()
        Logger.warning("no request bound")
        Logger.close()

        content = (log_dir / "paperlens.log").read_text(encoding="utf-8")
        assert "[WARNING] [-]" in content

    def test_set_level_filters_lower_levels(self, log_dir):
        Logger.set_level("ERROR")
        Logger.info("dropped", file=LogFiles.API)
        Logger.error("kept", file=LogFiles.API)
        Logger.close()

        content = (log_dir / "api" / "api.log").read_text(encoding="utf-8")
        assert "dropped" not in content
        assert "kept" in content

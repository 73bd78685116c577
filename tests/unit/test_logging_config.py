"""Unit tests for balancesim logging configuration."""

from __future__ import annotations

import json
import logging

import balancesim
from balancesim.logging_config import (
    LOGGER_NAME,
    JsonFormatter,
    _clear_handlers,
    _get_level,
    _get_logger,
)


class TestSilentByDefault:
    def test_library_warnings_not_printed(self, capfd):
        logging.getLogger(f"{LOGGER_NAME}.simulation").warning("dropped request")
        captured = capfd.readouterr()
        assert captured.out == ""
        assert captured.err == ""

    def test_logger_has_null_handler(self):
        logger = logging.getLogger(LOGGER_NAME)
        assert any(isinstance(h, logging.NullHandler) for h in logger.handlers)

    def test_engine_run_is_silent(self, capfd):
        balancesim.LoadBalancer(2, 20, seed=1).run()
        captured = capfd.readouterr()
        assert captured.out == ""
        assert captured.err == ""


class TestEnableConsoleLogging:
    def test_sets_level_and_handler(self):
        balancesim.enable_console_logging(level="DEBUG")
        logger = _get_logger()
        assert logger.level == logging.DEBUG
        assert any(isinstance(h, logging.StreamHandler) for h in logger.handlers)

    def test_outputs_to_stderr(self, capfd):
        balancesim.enable_console_logging(level="INFO")
        logging.getLogger(f"{LOGGER_NAME}.test").info("test message")
        assert "test message" in capfd.readouterr().err

    def test_custom_format(self, capfd):
        balancesim.enable_console_logging(level="INFO", format="[CUSTOM] %(message)s")
        logging.getLogger(f"{LOGGER_NAME}.test").info("hello")
        assert "[CUSTOM] hello" in capfd.readouterr().err

    def test_scale_events_logged_at_info(self, capfd):
        balancesim.enable_console_logging(level="INFO", format="%(name)s %(message)s")
        policy = balancesim.PolicyConfig(admission_probability=0.0, backlog_per_worker=27)
        balancesim.LoadBalancer(1, 1, policy, seed=1).run()
        err = capfd.readouterr().err
        assert "balancesim.components.auto_scaler" in err
        assert "Scale out: 1 -> 2" in err


class TestEnableFileLogging:
    def test_writes_to_file(self, tmp_path):
        path = tmp_path / "nested" / "sim.log"
        balancesim.enable_file_logging(path, level="INFO")
        logging.getLogger(f"{LOGGER_NAME}.test").info("file message")
        for handler in _get_logger().handlers:
            handler.flush()
        assert "file message" in path.read_text()


class TestJsonLogging:
    def test_formatter_output(self):
        record = logging.LogRecord(
            name="balancesim.test", level=logging.WARNING, pathname=__file__, lineno=1,
            msg="queue %d", args=(5,), exc_info=None,
        )
        data = json.loads(JsonFormatter().format(record))
        assert data["level"] == "WARNING"
        assert data["logger"] == "balancesim.test"
        assert data["message"] == "queue 5"
        assert "timestamp" in data

    def test_json_file(self, tmp_path):
        path = tmp_path / "sim.json"
        balancesim.enable_json_logging(path=path)
        logging.getLogger(f"{LOGGER_NAME}.test").info("structured")
        for handler in _get_logger().handlers:
            handler.flush()
        line = path.read_text().strip().splitlines()[-1]
        assert json.loads(line)["message"] == "structured"


class TestConfigureFromEnv:
    def test_no_env_does_nothing(self, monkeypatch):
        for var in ("BS_LOGGING", "BS_LOG_FILE", "BS_LOG_JSON"):
            monkeypatch.delenv(var, raising=False)
        before = list(_get_logger().handlers)
        balancesim.configure_from_env()
        assert _get_logger().handlers == before

    def test_level_from_env(self, monkeypatch):
        monkeypatch.setenv("BS_LOGGING", "warning")
        monkeypatch.delenv("BS_LOG_FILE", raising=False)
        monkeypatch.delenv("BS_LOG_JSON", raising=False)
        balancesim.configure_from_env()
        assert _get_logger().level == logging.WARNING

    def test_file_from_env(self, monkeypatch, tmp_path):
        path = tmp_path / "env.log"
        monkeypatch.delenv("BS_LOGGING", raising=False)
        monkeypatch.setenv("BS_LOG_FILE", str(path))
        monkeypatch.delenv("BS_LOG_JSON", raising=False)
        balancesim.configure_from_env()
        logging.getLogger(f"{LOGGER_NAME}.test").info("from env")
        for handler in _get_logger().handlers:
            handler.flush()
        assert "from env" in path.read_text()


class TestLevels:
    def test_get_level(self):
        assert _get_level("debug") == logging.DEBUG
        assert _get_level(logging.ERROR) == logging.ERROR
        assert _get_level("nonsense") == logging.INFO

    def test_set_module_level(self):
        balancesim.set_module_level("components.auto_scaler", "ERROR")
        assert logging.getLogger("balancesim.components.auto_scaler").level == logging.ERROR
        logging.getLogger("balancesim.components.auto_scaler").setLevel(logging.NOTSET)

    def test_set_level(self):
        balancesim.set_level("CRITICAL")
        assert _get_logger().level == logging.CRITICAL


class TestDisableLogging:
    def test_disable_removes_handlers(self, capfd):
        balancesim.enable_console_logging()
        balancesim.disable_logging()
        logging.getLogger(f"{LOGGER_NAME}.test").error("hidden")
        assert "hidden" not in capfd.readouterr().err
        assert all(isinstance(h, logging.NullHandler) for h in _get_logger().handlers)

    def test_clear_handlers_keeps_null_handler(self):
        balancesim.enable_console_logging()
        _clear_handlers()
        assert all(isinstance(h, logging.NullHandler) for h in _get_logger().handlers)

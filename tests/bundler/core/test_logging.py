# tests/bundler/core/test_logging.py
import json
import logging

import pytest

from bundler.core.logging import (
    clearLogContext,
    configureLogging,
    dropLogContext,
    getLogContext,
    setLogContext,
)
from bundler.core.logging.formatters import DevFormatter, JsonFormatter


def _record(msg: str = "hello %s", args=("world",), exc_info=None) -> logging.LogRecord:
    return logging.LogRecord("bundler.test", logging.WARNING, __file__, 1, msg, args, exc_info)


def test_context_set_drop_clear():
    setLogContext(bundle="My App", reference=None)
    assert getLogContext() == {"bundle": "My App"}
    setLogContext(reference="main.js")
    assert getLogContext() == {"bundle": "My App", "reference": "main.js"}
    dropLogContext("reference")
    assert getLogContext() == {"bundle": "My App"}
    dropLogContext("bundle")
    assert getLogContext() is None
    setLogContext(bundle="x")
    clearLogContext()
    assert getLogContext() is None


def test_dev_formatter_without_context():
    assert DevFormatter().format(_record()) == "WARNING: [bundler.test] hello world"
    assert DevFormatter(showLogger=False).format(_record()) == "WARNING: hello world"


def test_dev_formatter_shows_context():
    setLogContext(bundle="My App", reference="main.js")
    assert DevFormatter(showLogger=False).format(_record()) == "WARNING: hello world [My App/main.js]"


def test_json_formatter():
    setLogContext(bundle="My App")
    payload = json.loads(JsonFormatter().format(_record()))
    assert payload["level"] == "warning"
    assert payload["logger"] == "bundler.test"
    assert payload["msg"] == "hello world"
    assert payload["ctx"] == {"bundle": "My App"}
    assert "exc" not in payload


def test_json_formatter_with_exception():
    try:
        raise ValueError("boom")
    except ValueError:
        import sys
        record = _record(exc_info=sys.exc_info())
    payload = json.loads(JsonFormatter().format(record))
    assert payload["exc"]["type"] == "ValueError"
    assert payload["exc"]["message"] == "boom"
    assert "Traceback" in payload["exc"]["stack"]


@pytest.fixture()
def restoreRootLogger():
    root = logging.getLogger()
    handlers, level = list(root.handlers), root.level
    yield
    for handler in root.handlers:
        if handler not in handlers:
            handler.close()
    root.handlers[:] = handlers
    root.setLevel(level)


def test_configure_logging_writes_json_file(tmp_path, restoreRootLogger):
    logFile = tmp_path / "bundle.log"
    configureLogging(devMode=True, logFile=logFile)
    setLogContext(bundle="My App")
    logging.getLogger("bundler.test").debug("resolved %d files", 3)
    for handler in logging.getLogger().handlers:
        handler.flush()

    [line] = logFile.read_text(encoding="utf-8").splitlines()
    payload = json.loads(line)
    assert payload["msg"] == "resolved 3 files"
    assert payload["level"] == "debug"
    assert payload["ctx"] == {"bundle": "My App"}


def test_configure_logging_default_level(restoreRootLogger):
    configureLogging()
    root = logging.getLogger()
    assert root.level == logging.INFO
    assert len(root.handlers) == 1

# tests/unit/test_logging.py
# JSON log configuration and the dispatcher logging hooks

import json
import logging

import pytest
from starlette.requests import Request

from relay.observability.logger import TraceIdFilter, configure_logging
from relay.utils.logger import log_info, log_request, log_response


@pytest.fixture
def clean_loggers():
    """Detach whatever handlers a test adds to the root/access/error loggers."""
    names = ("", "access", "error")
    before = {name: list(logging.getLogger(name).handlers) for name in names}
    yield
    for name in names:
        lg = logging.getLogger(name)
        for handler in lg.handlers:
            if handler not in before[name]:
                handler.close()
        lg.handlers = before[name]


def test_file_logs_are_json(make_settings, tmp_path, clean_loggers):
    logs_path = tmp_path / "logs"
    configure_logging(make_settings(LOG_TO_FILE=True, LOGS_PATH=str(logs_path)))

    log_info("relay test line")
    for handler in logging.getLogger("access").handlers:
        handler.flush()

    lines = (logs_path / "access.log").read_text(encoding="utf-8").splitlines()
    record = json.loads(lines[-1])
    assert record["message"] == "relay test line"
    assert record["levelname"] == "INFO"
    assert record["trace_id"] is None
    assert (logs_path / "error.log").exists()


def test_trace_id_filter_without_active_span():
    record = logging.LogRecord("access", logging.INFO, __file__, 1, "msg", None, None)

    assert TraceIdFilter().filter(record)
    assert record.trace_id is None


def test_request_hooks_log_method_path_and_status(caplog):
    request = Request({
        "type": "http",
        "method": "POST",
        "path": "/claim",
        "headers": [],
        "client": ("203.0.113.7", 1234),
    })

    with caplog.at_level(logging.INFO, logger="access"):
        log_request(request, None)
        log_response(request, 404)

    messages = [r.getMessage() for r in caplog.records if r.name == "access"]
    assert messages[0] == "POST /claim from 203.0.113.7"
    assert messages[1].startswith("POST /claim → 404")


def test_response_hook_measures_from_request_stamp(caplog, monkeypatch):
    import relay.utils.logger as relay_logger

    monkeypatch.setattr(relay_logger, "now_ms", lambda: 1_700_000_000_250)
    request = Request({"type": "http", "method": "GET", "path": "/", "headers": []})
    request.state.request_time = 1_700_000_000_000

    with caplog.at_level(logging.INFO, logger="access"):
        log_response(request, 200)

    messages = [r.getMessage() for r in caplog.records if r.name == "access"]
    assert messages == ["GET / → 200 (250ms)"]

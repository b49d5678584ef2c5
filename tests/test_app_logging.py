from __future__ import annotations

import json
import logging

from pythonjsonlogger import jsonlogger

from app_logging import setup_logging


def test_setup_logging_installs_single_json_handler(capsys) -> None:  # noqa: ANN001
    root = logging.getLogger()
    saved_handlers, saved_level = root.handlers[:], root.level
    try:
        setup_logging()
        setup_logging()  # idempotent

        assert len(root.handlers) == 1
        assert isinstance(root.handlers[0].formatter, jsonlogger.JsonFormatter)

        logging.getLogger("recorder").info("Recording started", extra={"sample_rate": 44100})

        line = capsys.readouterr().out.strip().splitlines()[-1]
        record = json.loads(line)
        assert record["message"] == "Recording started"
        assert record["name"] == "recorder"
        assert record["sample_rate"] == 44100
    finally:
        root.handlers = saved_handlers
        root.setLevel(saved_level)

"""日志配置测试"""

from __future__ import annotations

import json
import logging

from clibpm.utils.logger import JSONFormatter, reset_logging, setup_logging


class TestJSONFormatter:
    def test_format(self) -> None:
        record = logging.LogRecord(
            "clibpm.test", logging.INFO, __file__, 1, "已安装: %s", ("acme/foo@1.0.0",), None,
        )
        entry = json.loads(JSONFormatter().format(record))
        assert entry["level"] == "INFO"
        assert entry["logger"] == "clibpm.test"
        assert entry["message"] == "已安装: acme/foo@1.0.0"
        assert "thread" in entry


class TestSetupLogging:
    def test_single_handler(self) -> None:
        root = logging.getLogger()
        saved = root.handlers[:]
        saved_level = root.level
        try:
            setup_logging("DEBUG")
            setup_logging("DEBUG", json_output=True)
            assert len(root.handlers) == 1
            assert isinstance(root.handlers[0].formatter, JSONFormatter)
            assert root.level == logging.DEBUG
        finally:
            reset_logging()
            for h in saved:
                root.addHandler(h)
            root.setLevel(saved_level)

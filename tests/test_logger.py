from __future__ import annotations

import logging
import unittest

from db_helper import configure_logging, get_logger
from db_helper.utils import logger as logger_module


class LoggerTests(unittest.TestCase):
    def tearDown(self) -> None:
        package_logger = logging.getLogger("db_helper")
        if logger_module._handler is not None:
            package_logger.removeHandler(logger_module._handler)
            logger_module._handler = None
        package_logger.setLevel(logging.NOTSET)

    def test_module_loggers_live_under_package(self) -> None:
        log = get_logger("db_helper.ports.db_api.executor")
        self.assertEqual(log.name, "db_helper.ports.db_api.executor")
        package_logger = logging.getLogger("db_helper")
        self.assertTrue(any(isinstance(h, logging.NullHandler) for h in package_logger.handlers))

    def test_configure_logging_adds_one_handler(self) -> None:
        package_logger = configure_logging(logging.DEBUG)
        configure_logging(logging.INFO)
        stream_handlers = [h for h in package_logger.handlers if isinstance(h, logging.StreamHandler)]
        self.assertEqual(len(stream_handlers), 1)
        self.assertEqual(package_logger.level, logging.INFO)


if __name__ == "__main__":
    unittest.main()

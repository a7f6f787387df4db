from __future__ import annotations

import logging
import unittest

from gcp_release_digest.observability import logger as digest_logger


class TestCorrelationId(unittest.TestCase):
    def test_bind_and_restore(self) -> None:
        self.assertIsNone(digest_logger.get_correlation_id())
        with digest_logger.bind_correlation_id("run-1"):
            self.assertEqual(digest_logger.get_correlation_id(), "run-1")
            with digest_logger.bind_correlation_id("run-2"):
                self.assertEqual(digest_logger.get_correlation_id(), "run-2")
            self.assertEqual(digest_logger.get_correlation_id(), "run-1")
        self.assertIsNone(digest_logger.get_correlation_id())

    def test_new_ids_are_unique(self) -> None:
        self.assertNotEqual(digest_logger.new_correlation_id(), digest_logger.new_correlation_id())

    def test_filter_tags_records(self) -> None:
        record = logging.LogRecord("x", logging.INFO, __file__, 1, "msg", None, None)
        log_filter = digest_logger._RunIdFilter()

        log_filter.filter(record)
        self.assertEqual(record.correlation_id, "-")

        with digest_logger.bind_correlation_id("abc"):
            log_filter.filter(record)
        self.assertEqual(record.correlation_id, "abc")


if __name__ == "__main__":
    unittest.main()

"""
Test biorecords.logging

The parsers add context (format, source, line number) to their log records.
"""

import logging
from io import StringIO
from unittest.mock import Mock
from biorecords.logging import ParseLoggerAdapter
from biorecords.alignment import gaf
from .test_common import TestBase, DumbLogHandler, text


class TestParseLoggerAdapter(TestBase):
    """Test the parse-context logger adapter.

    This should add context-specific information to log records, otherwise
    passing through logging calls to the standard logging functions.
    """

    def test_basic(self):
        """Test that the logger adapter does all the basic logger stuff."""
        logger = Mock(logging.Logger)
        adapter = ParseLoggerAdapter(logger)
        extra = {"format": None, "source": None, "line": None}
        for lvl in ["debug", "info", "warning", "error", "critical"]:
            with self.subTest(level=lvl):
                lvlnum = getattr(logging, lvl.upper())
                adapter.log(lvlnum, "log message %s" % lvl)
                logger.log.assert_called_with(lvlnum, "log message %s" % lvl, extra=extra)
                logger.reset_mock()
                getattr(adapter, lvl)("log message")
                logger.log.assert_called_with(lvlnum, "log message", extra=extra)

    def test_context(self):
        """Objects given as context are coerced to their names."""
        logger = Mock(logging.Logger)
        source = Mock()
        source.name = "input.gaf"
        adapter = ParseLoggerAdapter(logger, {"format": gaf.GafParser(), "source": source})
        adapter.at_line(7)
        adapter.debug("message")
        logger.log.assert_called_with(
            logging.DEBUG, "message",
            extra={"format": "GAF", "source": "input.gaf", "line": 7})

    def test_context_text(self):
        """Objects without names are used as text."""
        logger = Mock(logging.Logger)
        adapter = ParseLoggerAdapter(logger, {"format": "SAM", "source": StringIO()})
        self.assertEqual(adapter.extra["format"], "SAM")
        self.assertTrue(adapter.extra["source"].startswith("<_io.StringIO"))


class TestParseLogging(TestBase):
    """Test the log records a real parse produces."""

    def setUp(self):
        self.handler = DumbLogHandler()
        self.logger = logging.getLogger("biorecords.parser")
        self.level = self.logger.level
        self.logger.setLevel(logging.DEBUG)
        self.logger.addHandler(self.handler)

    def tearDown(self):
        self.logger.removeHandler(self.handler)
        self.logger.setLevel(self.level)

    def test_parse_logging(self):
        gaf.read(text(
            "read1\t6\t0\t6\t+\tchr1\t17\t7\t13\t6\t6\t60",
            "read2\t6\t0\t6\t+\tchr1\t17\t7\t13\t6\t6\t60"))
        self.assertTrue(self.handler.records)
        for rec in self.handler.records:
            self.assertEqual(rec.format, "GAF")
        self.assertTrue(self.handler.has_message_text("finished GAF after 2 lines"))
        self.assertEqual(self.handler.records[-1].line, 2)

    def test_stop_logging(self):
        gaf.stream(
            text(
                "read1\t6\t0\t6\t+\tchr1\t17\t7\t13\t6\t6\t60",
                "read2\t6\t0\t6\t+\tchr1\t17\t7\t13\t6\t6\t60"),
            lambda rec: False)
        self.assertTrue(self.handler.has_message_text("stopped by listener"))

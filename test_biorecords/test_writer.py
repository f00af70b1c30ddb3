"""
Test biorecords.writer.
"""

from io import StringIO
from biorecords import writer
from .test_common import TestBase
from .test_record import Span


class TestWriter(TestBase):

    def setUp(self):
        self.records = [
            Span(name="a", start=0, end=1, fields=[("NM", "i", None, ("1",))]),
            Span(name="b", start=2, end=3)]

    def test_write_record(self):
        out = StringIO()
        writer.write_record(self.records[0], out)
        self.assertEqual(out.getvalue(), "a\t0\t1\tNM:i:1\n")

    def test_write_records(self):
        out = StringIO()
        self.assertEqual(writer.write_records(self.records, out), 2)
        self.assertEqual(out.getvalue(), "a\t0\t1\tNM:i:1\nb\t2\t3\n")
        self.assertEqual(writer.write_records([], out), 0)

    def test_write_lines(self):
        """Lines get exactly one terminator each."""
        out = StringIO()
        writer.write_lines(["#one", "#two\n"], out)
        self.assertEqual(out.getvalue(), "#one\n#two\n")

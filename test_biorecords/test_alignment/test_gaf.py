"""
Test biorecords.alignment.gaf
"""

from io import StringIO
from biorecords.alignment import gaf
from biorecords.alignment.gaf import GafRecord
from biorecords.parser import ParseAdapter
from biorecords.util import FormatError, ValidationError
from ..test_common import TestBase, ListenerStub, text

LINE = "read1\t6\t0\t6\t+\tchr1\t17\t7\t13\t6\t6\t60\tcg:Z:6M"


class TestGafRecord(TestBase):
    """Test a single GAF line in and out."""

    def test_from_line(self):
        rec = gaf.from_line(LINE)
        self.assertEqual(rec.query_name, "read1")
        self.assertEqual(rec.query_length, 6)
        self.assertEqual(rec.query_start, 0)
        self.assertEqual(rec.query_end, 6)
        self.assertEqual(rec.strand, "+")
        self.assertEqual(rec.path_name, "chr1")
        self.assertEqual(rec.path_length, 17)
        self.assertEqual(rec.path_start, 7)
        self.assertEqual(rec.path_end, 13)
        self.assertEqual(rec.matches, 6)
        self.assertEqual(rec.alignment_block_length, 6)
        self.assertEqual(rec.mapping_quality, 60)
        self.assertEqual(rec.fields.type_of("cg"), "Z")
        self.assertEqual(rec.get_field_string("cg"), "6M")
        self.assertEqual(rec.line_number, 1)
        self.assertEqual(rec.to_line(), LINE)

    def test_too_few_tokens(self):
        with self.assertRaises(FormatError) as cm:
            gaf.from_line("read1\t6\t0\t6\t+\tchr1\t17\t7\t13\t6\t6")
        self.assertIn("expected 12 or more tokens, found 11", str(cm.exception))

    def test_invalid_values(self):
        """Values outside their domain are reported for their line."""
        cases = {
            "strand": LINE.replace("\t+\t", "\tx\t"),
            "mapping_quality": LINE.replace("\t60\t", "\t256\t"),
            "query_end": LINE.replace("6\t0\t6", "6\t5\t4"),
            }
        for field, line in cases.items():
            with self.subTest(field=field):
                with self.assertRaises(FormatError) as cm:
                    gaf.read(text(LINE, line))
                self.assertEqual(cm.exception.line_number, 2)
                self.assertEqual(cm.exception.__cause__.field, field)

    def test_json_field_rejected(self):
        """J fields belong to GFA and are an error in GAF."""
        with self.assertRaises(FormatError) as cm:
            gaf.from_line(LINE + "\tXJ:J:{}")
        self.assertEqual(cm.exception.tag, "XJ")

    def test_sentinel_names(self):
        """A "*" name is read as None and written back as "*"."""
        line = LINE.replace("read1", "*").replace("chr1", "*")
        rec = gaf.from_line(line)
        self.assertIsNone(rec.query_name)
        self.assertIsNone(rec.path_name)
        self.assertEqual(rec.to_line(), line)

    def test_construct(self):
        """Records built directly are validated the same way."""
        rec = gaf.builder().with_query_name("q").with_path_name("p").build()
        self.assertEqual(rec.strand, "+")
        self.assertEqual(rec.mapping_quality, 255)
        self.assertEqual(rec.to_line(), "q\t0\t0\t0\t+\tp\t0\t0\t0\t0\t0\t255")
        with self.assertRaises(ValidationError) as cm:
            GafRecord(
                query_name="q", query_length=-1, query_start=0, query_end=0,
                strand="+", path_name="p", path_length=0, path_start=0,
                path_end=0, matches=0, alignment_block_length=0,
                mapping_quality=0)
        self.assertEqual(cm.exception.field, "query_length")
        self.assertEqual(cm.exception.value, -1)

    def test_derive(self):
        """A builder from a record can swap out one field."""
        rec = gaf.from_line(LINE + "\tNM:i:0")
        rec2 = gaf.builder(rec).replace_field("cg", "Z", "5M1X").build()
        self.assertEqual(rec2.to_line(), LINE.replace("\tcg:Z:6M", "") + "\tNM:i:0\tcg:Z:5M1X")
        self.assertEqual(rec.get_field_string("cg"), "6M")


class TestGafRead(TestBase):
    """Test reading and writing a whole GAF file."""

    def setUp(self):
        with open(self.path / "example.gaf") as f_in:
            self.txt = f_in.read()

    def test_read(self):
        records = gaf.read(StringIO(self.txt))
        self.assertEqual(len(records), 3)
        self.assertEqual([rec.line_number for rec in records], [1, 2, 3])
        self.assertEqual(records[1].path_name, ">s1<s2>s3")
        self.assertEqual(records[1].strand, "-")
        self.assertEqual(records[1].get_field_integer("NM"), 1)
        self.assertIsNone(records[2].path_name)
        self.assertEqual(records[2].get_field_integers("ZT"), [1, 2, 3])
        self.assertEqual(records[2].fields.array_type_of("ZT"), "i")

    def test_round_trip(self):
        """Every line read is written back unchanged."""
        out = StringIO()
        gaf.write(gaf.read(StringIO(self.txt)), out)
        self.assertEqual(out.getvalue(), self.txt)

    def test_early_stop(self):
        stub = ListenerStub(stop_after=1)
        gaf.stream(StringIO(self.txt), stub)
        self.assertEqual([rec.query_name for rec in stub.records], ["read1"])

    def test_parse_events(self):
        """The low-level parser sends one event per column and field."""
        events = []
        class Fields(ParseAdapter):
            def field(self, tag, type_code, value):
                events.append((tag, type_code, value))
        gaf.parse(StringIO(self.txt), Fields())
        self.assertEqual(events, [("cg", "Z", "6M"), ("NM", "i", "1"), ("cg", "Z", "4M1X5M")])

"""
Test biorecords.fields: the tag:type:value optional field codec.
"""

from biorecords import fields
from biorecords.fields import OptionalField, OptionalFields
from biorecords.util import FormatError, MissingFieldError
from .test_common import TestBase


class TestParseField(TestBase):
    """Test parsing single tag:type:value tokens."""

    def test_parse_field(self):
        """A scalar field should keep its value as text."""
        self.assertEqual(
            fields.parse_field("cg:Z:6M"),
            OptionalField("cg", "Z", None, ("6M",)))
        self.assertEqual(
            fields.parse_field("NM:i:-3"),
            OptionalField("NM", "i", None, ("-3",)))

    def test_parse_field_colons(self):
        """A Z value can contain colons of its own."""
        entry = fields.parse_field("XZ:Z:a:b:c")
        self.assertEqual(entry.values, ("a:b:c",))

    def test_parse_field_array(self):
        """A B field should split into its element type and elements."""
        entry = fields.parse_field("ZT:B:i,1,2,3")
        self.assertEqual(entry, OptionalField("ZT", "B", "i", ("1", "2", "3")))
        entry = fields.parse_field("ZF:B:f,1.5,-2e3")
        self.assertEqual(entry.array_type, "f")
        self.assertEqual(entry.values, ("1.5", "-2e3"))
        entry = fields.parse_field("ZE:B:c")
        self.assertEqual(entry.values, ())

    def test_parse_field_sentinel(self):
        """The missing value sentinel is accepted for any type."""
        for type_code in "AifZH":
            with self.subTest(type_code=type_code):
                entry = fields.parse_field("XX:%s:*" % type_code)
                self.assertEqual(entry.values, ("*",))

    def test_parse_field_malformed(self):
        """Malformed fields should raise FormatError with the line number."""
        cases = [
            "cg:Z",          # too few parts
            "c:Z:6M",        # tag too short
            "1c:Z:6M",       # tag starts with a digit
            "cg:Q:6M",       # unknown type
            "NM:i:abc",      # not an integer
            "NM:i:1.5",      # not an integer either
            "XF:f:1.2.3",    # not a float
            "XA:A:ab",       # too long for a character
            "XH:H:1AE",      # odd number of hex digits
            "XH:H:1G",       # not hex
            "ZB:B:c,200",    # out of range for int8
            "ZB:B:q,1",      # unknown array type
            "ZB:B:i1,2",     # no comma after the array type
            "",              # empty token
            ]
        for token in cases:
            with self.subTest(token=token):
                with self.assertRaises(FormatError) as cm:
                    fields.parse_field(token, 5)
                self.assertEqual(cm.exception.line_number, 5)
                self.assertIn("(line 5)", str(cm.exception))

    def test_parse_field_json(self):
        """J fields are only accepted when the allowed types include J."""
        with self.assertRaises(FormatError):
            fields.parse_field("XJ:J:{}")
        entry = fields.parse_field('XJ:J:{"a":1}', types=fields.GFA1_TYPES)
        self.assertEqual(entry, OptionalField("XJ", "J", None, ('{"a":1}',)))

    def test_parse_field_no_line_number(self):
        """Without a line number the message doesn't mention one."""
        with self.assertRaises(FormatError) as cm:
            fields.parse_field("NM:i:abc")
        self.assertIsNone(cm.exception.line_number)
        self.assertEqual(cm.exception.tag, "NM")
        self.assertNotIn("line", str(cm.exception))


class TestTypedValues(TestBase):
    """Test decoding typed values for a tag from a fields multimap."""

    def setUp(self):
        self.fields = OptionalFields([
            ("XA", "A", None, ("c",)),
            ("NM", "i", None, ("5",)),
            ("XU", "i", None, ("4294967295",)),
            ("XF", "f", None, ("1.5",)),
            ("XZ", "Z", None, ("hello",)),
            ("XH", "H", None, ("1AE301",)),
            ("ZI", "B", "i", ("1", "-2", "3")),
            ("ZF", "B", "f", ("1.5", "2")),
            ("ZC", "B", "C", ("255", "0")),
            ("XM", "i", None, ("*",)),
            ("XB", "Z", None, ("abc",)),
            ])

    def test_scalars(self):
        """Each scalar type should decode to a Python value."""
        self.assertEqual(fields.parse_character("XA", self.fields), "c")
        self.assertEqual(fields.parse_integer("NM", self.fields), 5)
        self.assertEqual(fields.parse_integer("XU", self.fields), 4294967295)
        self.assertEqual(fields.parse_float("XF", self.fields), 1.5)
        self.assertEqual(fields.parse_string("XZ", self.fields), "hello")
        self.assertEqual(
            fields.parse_byte_array("XH", self.fields), bytes([0x1A, 0xE3, 0x01]))

    def test_arrays(self):
        """Array types should decode to lists."""
        self.assertEqual(fields.parse_integers("ZI", self.fields), [1, -2, 3])
        self.assertEqual(fields.parse_floats("ZF", self.fields), [1.5, 2.0])
        self.assertEqual(fields.parse_bytes("ZC", self.fields), [255, 0])

    def test_array_length(self):
        """An expected array length is checked if given."""
        self.assertEqual(fields.parse_integers("ZI", self.fields, 3), [1, -2, 3])
        with self.assertRaises(FormatError):
            fields.parse_integers("ZI", self.fields, 2)
        with self.assertRaises(FormatError):
            fields.parse_floats("ZF", self.fields, 3)

    def test_array_type_mismatch(self):
        """Asking for the wrong kind of array is a FormatError."""
        with self.assertRaises(FormatError):
            fields.parse_bytes("ZI", self.fields)
        with self.assertRaises(FormatError):
            fields.parse_integers("ZF", self.fields)

    def test_missing(self):
        """An absent tag or the sentinel value is a MissingFieldError."""
        with self.assertRaises(MissingFieldError) as cm:
            fields.parse_integer("XX", self.fields)
        self.assertEqual(cm.exception.tag, "XX")
        self.assertIsInstance(cm.exception, LookupError)
        with self.assertRaises(MissingFieldError):
            fields.parse_integer("XM", self.fields)
        with self.assertRaises(MissingFieldError):
            fields.parse_integers("XX", self.fields)

    def test_bad_value(self):
        """Text that can't be read as the requested type is a FormatError."""
        with self.assertRaises(FormatError) as cm:
            fields.parse_integer("XB", self.fields)
        self.assertEqual(cm.exception.tag, "XB")
        self.assertEqual(cm.exception.token, "abc")
        self.assertIsInstance(cm.exception, ValueError)

    def test_out_of_range(self):
        """Integers beyond 32 bits are a FormatError."""
        with self.assertRaises(FormatError):
            fields.parse_integer("NM", {"NM": ("4294967296",)})
        with self.assertRaises(FormatError):
            fields.parse_integer("NM", {"NM": ("-2147483649",)})

    def test_duplicates(self):
        """Several values for a scalar tag can't be read as one."""
        dups = OptionalFields([
            ("NM", "i", None, ("1",)),
            ("NM", "i", None, ("2",))])
        self.assertEqual(dups["NM"], ("1", "2"))
        with self.assertRaises(FormatError):
            fields.parse_integer("NM", dups)


class TestEncode(TestBase):
    """Test encoding Python values as field text."""

    def test_encode_scalars(self):
        self.assertEqual(fields.encode_character("c"), "c")
        self.assertEqual(fields.encode_integer(-7), "-7")
        self.assertEqual(fields.encode_float(1.0), "1")
        self.assertEqual(fields.encode_float(0.25), "0.25")
        self.assertEqual(fields.encode_string("6M"), "6M")
        self.assertEqual(fields.encode_byte_array(b"\x1a\xe3"), "1AE3")

    def test_encode_arrays(self):
        self.assertEqual(fields.encode_integers([1, -2]), ["1", "-2"])
        self.assertEqual(fields.encode_floats([1.5, 2.0]), ["1.5", "2"])

    def test_encode_invalid(self):
        with self.assertRaises(ValueError):
            fields.encode_character("ab")
        with self.assertRaises(ValueError):
            fields.encode_string("a\tb")

    def test_format_field(self):
        """format_field should give back the text parse_field reads."""
        self.assertEqual(fields.format_field("cg", "Z", ("6M",)), "cg:Z:6M")
        self.assertEqual(fields.format_field("ZT", "B", ("1", "2"), "i"), "ZT:B:i,1,2")
        self.assertEqual(fields.format_field("ZT", "B", (), "i"), "ZT:B:i")
        for token in ["cg:Z:6M", "ZT:B:i,1,2,3", "XZ:Z:a:b", "ZE:B:f"]:
            with self.subTest(token=token):
                self.assertEqual(str(fields.parse_field(token)), token)


class TestOptionalFields(TestBase):
    """Test the ordered optional field multimap."""

    def setUp(self):
        self.entries = [
            ("NM", "i", None, ("1",)),
            ("ZT", "B", "i", ("1", "2")),
            ("NM", "i", None, ("2",)),
            ]
        self.fields = OptionalFields(self.entries)

    def test_mapping(self):
        """Lookup by tag gives every value for that tag in order."""
        self.assertEqual(len(self.fields), 2)
        self.assertEqual(list(self.fields), ["NM", "ZT"])
        self.assertIn("NM", self.fields)
        self.assertNotIn("XX", self.fields)
        self.assertEqual(self.fields["NM"], ("1", "2"))
        self.assertEqual(self.fields["ZT"], ("1", "2"))
        self.assertEqual(self.fields.get("XX"), None)

    def test_entries(self):
        """Entries are kept separately, in insertion order."""
        self.assertEqual(len(self.fields.entries), 3)
        self.assertEqual(
            [str(entry) for entry in self.fields.entries],
            ["NM:i:1", "ZT:B:i,1,2", "NM:i:2"])

    def test_types(self):
        self.assertEqual(self.fields.types, {"NM": "i", "ZT": "B"})
        self.assertEqual(self.fields.array_types, {"ZT": "i"})
        self.assertEqual(self.fields.type_of("ZT"), "B")
        self.assertEqual(self.fields.array_type_of("ZT"), "i")
        self.assertIsNone(self.fields.array_type_of("NM"))
        self.assertIsNone(self.fields.type_of("XX"))

    def test_equality(self):
        """Equal entries give equal, equally-hashed multimaps."""
        other = OptionalFields(self.entries)
        self.assertEqual(self.fields, other)
        self.assertEqual(hash(self.fields), hash(other))
        self.assertNotEqual(self.fields, OptionalFields(self.entries[:2]))
        self.assertEqual(OptionalFields(), OptionalFields([]))

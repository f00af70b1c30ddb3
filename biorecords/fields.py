"""
The "tag:type:value" optional field convention shared by SAM, GAF, PAF and GFA.

Every optional field is kept as the text it was read from, so writing a record
reproduces its line exactly.  The parse_* functions below decode that text
into Python values on request, and the encode_* functions go the other way for
values built up in code.  Type codes:

    A  single printable character
    i  signed integer
    f  single-precision float
    Z  printable string
    H  byte array as pairs of hex digits
    B  numeric array; the value starts with an element type code (one of
       cCsSiIf) followed by comma-separated elements, e.g. "ZT:B:i,1,2,3"
    J  JSON, kept as text like Z; only GFA allows it (see GFA1_TYPES)

A value equal to MISSING ("*") counts as an absent field rather than a
malformed one.
"""

import re
from collections import namedtuple
from collections.abc import Mapping
from .util import FormatError, MissingFieldError, format_number

MISSING = "*"
ARRAY = "B"
TYPES = "AifZHB"
GFA1_TYPES = TYPES + "J"
ARRAY_TYPES = "cCsSiIf"
INTEGER_RANGES = {
    "c": (-2**7, 2**7 - 1),
    "C": (0, 2**8 - 1),
    "s": (-2**15, 2**15 - 1),
    "S": (0, 2**16 - 1),
    "i": (-2**31, 2**31 - 1),
    "I": (0, 2**32 - 1),
    }
# Scalar i fields hold anything a signed or unsigned 32-bit integer can.
SCALAR_INTEGER_RANGE = (-2**31, 2**32 - 1)

TAG = re.compile(r"^[A-Za-z][A-Za-z0-9]$")
INTEGER = re.compile(r"^[-+]?[0-9]+$")
FLOAT = re.compile(r"^[-+]?([0-9]*\.?[0-9]+|[0-9]+\.)([eE][-+]?[0-9]+)?$")
HEX = re.compile(r"^([0-9A-Fa-f]{2})*$")


class OptionalField(namedtuple("OptionalField", ["tag", "type", "array_type", "values"])):
    """A single optional field as it appeared on a line.

    values is a tuple of the raw text values: exactly one for scalar types,
    any number of elements for B arrays (with array_type set to the element
    type code).  Formats without typed fields (GFF3 attributes) leave type as
    None.
    """

    __slots__ = ()

    def __str__(self):
        return format_field(self.tag, self.type, self.values, self.array_type)


class OptionalFields(Mapping):
    """An immutable, ordered multimap of optional fields keyed by tag.

    Looking up a tag gives a tuple of every value stored under it, across all
    entries with that tag in the order they were added.  Duplicate tags are
    kept as separate entries rather than collapsed, so that writing them back
    out reproduces the original text.  The type recorded for a tag is the
    type of its first entry.
    """

    def __init__(self, entries=()):
        self._entries = tuple(
            OptionalField(e[0], e[1], e[2], tuple(e[3])) for e in entries)
        values = {}
        types = {}
        array_types = {}
        for entry in self._entries:
            values.setdefault(entry.tag, []).extend(entry.values)
            types.setdefault(entry.tag, entry.type)
            if entry.array_type is not None:
                array_types.setdefault(entry.tag, entry.array_type)
        self._values = {tag: tuple(vals) for tag, vals in values.items()}
        self._types = types
        self._array_types = array_types
        self._hash = hash(self._entries)

    @property
    def entries(self):
        """Tuple of OptionalField entries in insertion order."""
        return self._entries

    @property
    def types(self):
        """Dictionary of type codes by tag."""
        return dict(self._types)

    @property
    def array_types(self):
        """Dictionary of array element type codes by tag, for B fields."""
        return dict(self._array_types)

    def type_of(self, tag):
        """Type code for a tag, or None if absent."""
        return self._types.get(tag)

    def array_type_of(self, tag):
        """Array element type code for a tag, or None if absent or scalar."""
        return self._array_types.get(tag)

    def __getitem__(self, tag):
        return self._values[tag]

    def __iter__(self):
        return iter(self._values)

    def __len__(self):
        return len(self._values)

    def __eq__(self, other):
        if isinstance(other, OptionalFields):
            return self._entries == other._entries
        return super().__eq__(other)

    def __hash__(self):
        return self._hash

    def __repr__(self):
        return "OptionalFields(%r)" % (list(self._entries),)


def _values(tag, fields):
    try:
        return fields[tag]
    except KeyError:
        raise MissingFieldError("no value for tag %s" % tag, tag) from None

def _single(tag, fields, type_code):
    values = _values(tag, fields)
    if not values or tuple(values) == (MISSING,):
        raise MissingFieldError(
            "Type=%s value missing for tag %s" % (type_code, tag), tag)
    if len(values) > 1:
        raise FormatError(
            "more than one Type=%s value for tag %s" % (type_code, tag),
            tag=tag, token=",".join(values))
    return values[0]

def _array_type(tag, fields):
    try:
        return fields.array_type_of(tag)
    except AttributeError:
        return None

def _to_integer(tag, value, limits, type_code="i"):
    if not INTEGER.match(value):
        raise FormatError(
            "Type=%s value %s for tag %s not an integer" % (type_code, value, tag),
            tag=tag, token=value)
    number = int(value)
    low, high = limits
    if not low <= number <= high:
        raise FormatError(
            "Type=%s value %s for tag %s out of range [%d, %d]" % (
                type_code, value, tag, low, high),
            tag=tag, token=value)
    return number

def _to_float(tag, value, type_code="f"):
    if not FLOAT.match(value):
        raise FormatError(
            "Type=%s value %s for tag %s not a float" % (type_code, value, tag),
            tag=tag, token=value)
    return float(value)


def parse_character(tag, fields):
    """Return the single Type=A character stored for a tag."""
    value = _single(tag, fields, "A")
    if len(value) != 1:
        raise FormatError(
            "Type=A value %s for tag %s not one character" % (value, tag),
            tag=tag, token=value)
    return value

def parse_integer(tag, fields):
    """Return the single Type=i integer stored for a tag."""
    return _to_integer(tag, _single(tag, fields, "i"), SCALAR_INTEGER_RANGE)

def parse_float(tag, fields):
    """Return the single Type=f float stored for a tag."""
    return _to_float(tag, _single(tag, fields, "f"))

def parse_string(tag, fields):
    """Return the single Type=Z string stored for a tag."""
    return _single(tag, fields, "Z")

def parse_byte_array(tag, fields):
    """Return the single Type=H hex value stored for a tag as bytes."""
    value = _single(tag, fields, "H")
    if not HEX.match(value):
        raise FormatError(
            "Type=H value %s for tag %s not pairs of hex digits" % (value, tag),
            tag=tag, token=value)
    return bytes.fromhex(value)

def parse_bytes(tag, fields):
    """Return the elements of a Type=B byte array (c or C) as a list of ints."""
    array_type = _array_type(tag, fields)
    if array_type is not None and array_type not in "cC":
        raise FormatError(
            "Type=B array for tag %s has element type %s, not c or C" % (
                tag, array_type),
            tag=tag, token=array_type)
    limits = INTEGER_RANGES[array_type] if array_type else (-2**7, 2**8 - 1)
    values = _values(tag, fields)
    return [_to_integer(tag, value, limits, "B") for value in values]

def parse_integers(tag, fields, length=None):
    """Return the elements of a Type=B integer array as a list of ints.

    If length is given the array must have exactly that many elements.
    """
    array_type = _array_type(tag, fields)
    if array_type == "f":
        raise FormatError(
            "Type=B array for tag %s holds floats, not integers" % tag,
            tag=tag, token=array_type)
    limits = INTEGER_RANGES.get(array_type, INTEGER_RANGES["i"])
    values = _values(tag, fields)
    _check_length(tag, values, length, "[cCsSiI]")
    return [_to_integer(tag, value, limits, "B") for value in values]

def parse_floats(tag, fields, length=None):
    """Return the elements of a Type=B float array as a list of floats.

    If length is given the array must have exactly that many elements.
    """
    values = _values(tag, fields)
    _check_length(tag, values, length, "f")
    return [_to_float(tag, value, "B") for value in values]

def _check_length(tag, values, length, letters):
    if length is not None and len(values) != length:
        raise FormatError(
            "expected %d Type=B first letter %s values for tag %s, found %d" % (
                length, letters, tag, len(values)),
            tag=tag, token=",".join(values))


def encode_character(value):
    """Text for a Type=A value."""
    value = str(value)
    if len(value) != 1:
        raise ValueError("Type=A value must be one character, was %r" % value)
    return value

def encode_integer(value):
    """Text for a Type=i value."""
    return str(int(value))

def encode_float(value):
    """Text for a Type=f value."""
    return format_number(float(value))

def encode_string(value):
    """Text for a Type=Z value."""
    value = str(value)
    if "\t" in value or "\n" in value:
        raise ValueError("Type=Z value must not contain tabs or newlines")
    return value

def encode_byte_array(value):
    """Text for a Type=H value, as uppercase hex digit pairs."""
    return bytes(value).hex().upper()

def encode_integers(values):
    """Element texts for a Type=B integer array."""
    return [str(int(value)) for value in values]

def encode_floats(values):
    """Element texts for a Type=B float array."""
    return [format_number(float(value)) for value in values]


def format_field(tag, type_code, values, array_type=None):
    """Render one optional field as tag:type:value text."""
    if array_type is not None:
        value = array_type
        if values:
            value += "," + ",".join(values)
    else:
        value = ",".join(values)
    return "%s:%s:%s" % (tag, type_code, value)

def check_value(tag, type_code, value):
    """Check that the text of a scalar field can be read as its type.

    Raises FormatError (without a line number) if not.  The MISSING sentinel
    is accepted for every type.
    """
    if value == MISSING:
        return
    single = {tag: (value,)}
    if type_code == "A":
        parse_character(tag, single)
    elif type_code == "i":
        parse_integer(tag, single)
    elif type_code == "f":
        parse_float(tag, single)
    elif type_code == "H":
        parse_byte_array(tag, single)

def parse_field(token, line_number=None, types=TYPES):
    """Parse one tag:type:value token into an OptionalField.

    The value is everything after the second colon, so Z strings may
    themselves contain colons.  Values are checked against their type and
    FormatError is raised (tagged with line_number) for anything malformed.
    """
    parts = token.split(":", 2)
    if len(parts) < 3:
        raise FormatError(
            "invalid field %s, expected 3 tokens, found %d" % (token, len(parts)),
            line_number, token=token)
    tag, type_code, value = parts
    if not TAG.match(tag):
        raise FormatError(
            "invalid field tag %s, must match [A-Za-z][A-Za-z0-9]" % tag,
            line_number, tag=tag, token=token)
    if type_code not in types or len(type_code) != 1:
        raise FormatError(
            "invalid field type %s for tag %s" % (type_code, tag),
            line_number, tag=tag, token=token)
    try:
        if type_code == ARRAY:
            if not value or value[0] not in ARRAY_TYPES or value[1:2] not in ("", ","):
                raise FormatError(
                    "invalid Type=B value %s for tag %s" % (value, tag),
                    tag=tag, token=token)
            array_type = value[0]
            elements = tuple(value[2:].split(",")) if len(value) > 1 else ()
            entry = OptionalField(tag, type_code, array_type, elements)
            if array_type == "f":
                parse_floats(tag, {tag: elements})
            else:
                limits = INTEGER_RANGES[array_type]
                for element in elements:
                    _to_integer(tag, element, limits, "B")
            return entry
        check_value(tag, type_code, value)
    except FormatError as err:
        if line_number is None:
            raise
        raise FormatError(str(err), line_number, tag=tag, token=token) from err
    return OptionalField(tag, type_code, None, (value,))

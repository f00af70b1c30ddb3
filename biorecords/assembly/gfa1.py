"""
GFA 1 (graphical fragment assembly) records.

Each line starts with a one-letter record type:

    H  header, tags only
    S  segment: name, sequence
    L  link: from segment and orientation, to segment and orientation, overlap
    C  containment: like a link, plus the position of the contained segment
    P  path: name, comma-separated oriented segments, comma-separated overlaps

followed by optional tag:type:value fields.  "*" stands for an unknown
sequence or overlap.  Lines of any other record type are skipped, and lines
starting with "#" are comments.
"""

from ..fields import GFA1_TYPES, MISSING
from ..format import Format
from ..parser import Column, LineParser, BuilderAdapter, integer, character
from ..record import TaggedRecord, Builder, or_missing
from ..util import check

ORIENTATIONS = ("+", "-")


def segment_references(text):
    """Decode a path's segment list, e.g. "11+,12-", into (name, orientation) pairs."""
    references = []
    for item in text.split(","):
        if len(item) < 2 or item[-1] not in ORIENTATIONS:
            raise ValueError("segment references must be names followed by + or -")
        references.append((item[:-1], item[-1]))
    return tuple(references)

def overlaps(text):
    """Decode a path's comma-separated overlap list."""
    return tuple(text.split(","))


class Gfa1Record(TaggedRecord):
    """Base class for the GFA 1 record types."""

    RECORD_TYPE = None

    def _tokens(self):
        return []

    def to_line(self):
        return "\t".join([self.RECORD_TYPE] + self._tokens() + self._field_tokens())


class Header(Gfa1Record):
    """H line.  All of its content is in the optional fields."""

    RECORD_TYPE = "H"

    @property
    def version(self):
        """VN tag value, or None."""
        return self.get_field_string_opt("VN")


class Segment(Gfa1Record):
    """S line: a named sequence."""

    RECORD_TYPE = "S"
    POSITIONAL = ("name", "sequence")

    def validate(self):
        self._check_present("name")

    @property
    def length(self):
        """The LN tag if present, otherwise the sequence length (None if unknown)."""
        length = self.get_field_integer_opt("LN")
        if length is None and self.sequence is not None:
            length = len(self.sequence)
        return length

    def _tokens(self):
        return [self.name, or_missing(self.sequence)]


class Link(Gfa1Record):
    """L line: an overlap between the ends of two segments."""

    RECORD_TYPE = "L"
    POSITIONAL = ("source", "source_orientation", "target", "target_orientation", "overlap")

    def validate(self):
        self._check_present("source")
        self._check_present("target")
        self._check_choice("source_orientation", ORIENTATIONS)
        self._check_choice("target_orientation", ORIENTATIONS)

    def _tokens(self):
        return [
            self.source, self.source_orientation,
            self.target, self.target_orientation,
            or_missing(self.overlap)]


class Containment(Gfa1Record):
    """C line: one segment contained in another."""

    RECORD_TYPE = "C"
    POSITIONAL = (
        "container", "container_orientation",
        "contained", "contained_orientation", "position", "overlap")

    def validate(self):
        self._check_present("container")
        self._check_present("contained")
        self._check_choice("container_orientation", ORIENTATIONS)
        self._check_choice("contained_orientation", ORIENTATIONS)
        self._check_range("position", 0)

    def _tokens(self):
        return [
            self.container, self.container_orientation,
            self.contained, self.contained_orientation,
            str(self.position), or_missing(self.overlap)]


class Path(Gfa1Record):
    """P line: a named walk through oriented segments."""

    RECORD_TYPE = "P"
    POSITIONAL = ("name", "segments", "overlaps")

    def __init__(self, line_number=-1, fields=None, **values):
        for key in ("segments", "overlaps"):
            if values.get(key) is not None:
                values[key] = tuple(values[key])
        if values.get("segments") is not None:
            values["segments"] = tuple(tuple(ref) for ref in values["segments"])
        super().__init__(line_number, fields, **values)

    def validate(self):
        self._check_present("name")
        self._check_present("segments")
        for name, orientation in self.segments:
            check(name and orientation in ORIENTATIONS,
                  "segments must be names followed by + or -, was %r" % (self.segments,),
                  "segments", self.segments)

    def _tokens(self):
        segments = ",".join(name + orientation for name, orientation in self.segments)
        overlaps_text = MISSING
        if self.overlaps is not None:
            overlaps_text = ",".join(self.overlaps)
        return [self.name, segments, overlaps_text]


class HeaderBuilder(Builder):
    record_class = Header


class SegmentBuilder(Builder):
    record_class = Segment


class LinkBuilder(Builder):
    record_class = Link


class ContainmentBuilder(Builder):
    record_class = Containment
    DEFAULTS = {"position": 0}


class PathBuilder(Builder):
    record_class = Path


BUILDERS = {
    "H": HeaderBuilder,
    "S": SegmentBuilder,
    "L": LinkBuilder,
    "C": ContainmentBuilder,
    "P": PathBuilder,
    }


class RecordTypeParser(LineParser):
    """Base for the per-type GFA 1 parsers, which also allow J fields."""
    field_types = GFA1_TYPES


class HeaderParser(RecordTypeParser):
    name = "GFA 1 H"
    columns = (Column("record_type"),)


class SegmentParser(RecordTypeParser):
    name = "GFA 1 S"
    columns = (
        Column("record_type"),
        Column("name"),
        Column("sequence", missing=MISSING))


class LinkParser(RecordTypeParser):
    name = "GFA 1 L"
    columns = (
        Column("record_type"),
        Column("source"),
        Column("source_orientation", character),
        Column("target"),
        Column("target_orientation", character),
        Column("overlap", missing=MISSING))


class ContainmentParser(RecordTypeParser):
    name = "GFA 1 C"
    columns = (
        Column("record_type"),
        Column("container"),
        Column("container_orientation", character),
        Column("contained"),
        Column("contained_orientation", character),
        Column("position", integer),
        Column("overlap", missing=MISSING))


class PathParser(RecordTypeParser):
    name = "GFA 1 P"
    columns = (
        Column("record_type"),
        Column("name"),
        Column("segments", segment_references),
        Column("overlaps", overlaps, missing=MISSING))


class Gfa1Parser(LineParser):
    """Low-level GFA 1 parser, handing each line to the parser for its type.

    A record_type event comes first on every line, so listeners know which
    column events follow.
    """

    name = "GFA 1"
    field_types = GFA1_TYPES
    header_prefixes = ("#",)
    PARSERS = {
        "H": HeaderParser,
        "S": SegmentParser,
        "L": LinkParser,
        "C": ContainmentParser,
        "P": PathParser,
        }

    def __init__(self):
        super().__init__()
        self.parsers = {key: cls() for key, cls in self.PARSERS.items()}

    def parse_line(self, line, line_number, listener):
        record_type = line.split(self.delimiter, 1)[0].rstrip("\r\n")
        parser = self.parsers.get(record_type)
        if parser is None:
            self.logger.debug("skipping GFA 1 line of type %s", record_type)
            return True
        keep_going = parser.parse_line(line, line_number, listener)
        self.state = parser.state
        return keep_going


class Gfa1Adapter(BuilderAdapter):
    """Assemble GFA 1 parse events into records of each type.

    The builder argument is ignored; a builder is kept for each record type
    and the record_type event picks which one the following events go to.
    """

    def __init__(self, builder, listener):
        super().__init__(None, listener)
        self.builders = {key: cls() for key, cls in BUILDERS.items()}
        self._line_number = -1

    def line_number(self, line_number):
        self._line_number = line_number

    def record_type(self, record_type):
        self.builder = self.builders[record_type]
        self.builder.with_line_number(self._line_number)


class Gfa1Format(Format):
    """GFA 1, with a builder per record type."""

    def builder(self, record=None, record_type=None):
        """A new builder for a record type, or pre-populated from a record."""
        if record is not None:
            return BUILDERS[record.RECORD_TYPE].from_record(record)
        try:
            return BUILDERS[record_type]()
        except KeyError:
            raise ValueError("unknown GFA 1 record type %r" % (record_type,)) from None

    def adapter(self, listener):
        return self.adapter_class(None, listener)


GFA1 = FORMAT = Gfa1Format("GFA1", Gfa1Parser, None, Gfa1Adapter)

builder = GFA1.builder
parse = GFA1.parse
stream = GFA1.stream
read = GFA1.read
from_line = GFA1.from_line
write = GFA1.write
write_record = GFA1.write_record

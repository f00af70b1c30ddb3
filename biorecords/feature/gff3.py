"""
GFF3 (generic feature format version 3) records.

Nine tab-separated columns: seqid, source, type, start, end, score, strand,
phase, attributes.  Start and end are 1-based and inclusive in the file and
0-based, half-open here.  Score, strand and phase use "." for no value.
Attributes are key=value pairs separated by semicolons, with comma-separated
multiple values; a key may appear more than once and every value is kept.
Attribute text is kept as-is, without percent-decoding, so it is written back
unchanged.

Lines starting with "#" are headers (directives and comments).  A "##FASTA"
directive ends the feature section and nothing after it is read.
"""

from ..format import Format
from ..fields import OptionalField
from ..parser import Column, LineParser, integer, floating, one_based
from ..record import Record, Builder, or_missing
from ..util import FormatError, format_number

MISSING = "."
STRANDS = ("+", "-", "?")
FASTA_DIRECTIVE = "##FASTA"


class Gff3Record(Record):
    """One GFF3 feature line.  Attributes are held in the fields multimap."""

    POSITIONAL = (
        "seqid", "source", "feature_type", "start", "end",
        "score", "strand", "phase")

    def validate(self):
        self._check_present("seqid")
        self._check_present("source")
        self._check_present("feature_type")
        self._check_span("start", "end")
        self._check_choice("strand", STRANDS, optional=True)
        self._check_range("phase", 0, 2, optional=True)

    @property
    def attributes(self):
        """The attributes multimap: key to a tuple of every value."""
        return self.fields

    def attribute(self, key, default=None):
        """First value of an attribute, or default if absent."""
        values = self.fields.get(key)
        return values[0] if values else default

    @property
    def id(self):
        return self.attribute("ID")

    @property
    def name(self):
        return self.attribute("Name")

    @property
    def parents(self):
        """Tuple of Parent attribute values (possibly empty)."""
        return self.fields.get("Parent", ())

    @property
    def length(self):
        return self.end - self.start

    def attributes_text(self):
        """The attributes column as text, "." when there are none."""
        if not self.fields.entries:
            return MISSING
        return ";".join(
            "%s=%s" % (entry.tag, ",".join(entry.values))
            for entry in self.fields.entries)

    def to_line(self):
        score = MISSING if self.score is None else format_number(self.score)
        return "\t".join([
            self.seqid,
            self.source,
            self.feature_type,
            str(self.start + 1),
            str(self.end),
            score,
            or_missing(self.strand, MISSING),
            or_missing(self.phase, MISSING),
            self.attributes_text()])


class Gff3Builder(Builder):
    """Builder for Gff3Record."""

    record_class = Gff3Record

    def with_attribute(self, key, values):
        """Append one key=value attribute, with one or more values."""
        if isinstance(values, str):
            values = (values,)
        self.entries.append(OptionalField(key, None, None, tuple(values)))
        return self

    def replace_attribute(self, key, values):
        """Replace every value for an attribute key."""
        self.entries = [entry for entry in self.entries if entry.tag != key]
        return self.with_attribute(key, values)


def parse_attributes(text, line_number=None):
    """Parse an attributes column into a list of (key, values tuple) pairs."""
    attributes = []
    if text in (MISSING, ""):
        return attributes
    for token in text.split(";"):
        token = token.strip()
        if not token:
            continue
        key, sep, value = token.partition("=")
        if not sep or not key:
            raise FormatError(
                "invalid GFF3 attribute %s, expected key=value" % token,
                line_number, tag=key or None, token=token)
        attributes.append((key, tuple(value.split(","))))
    return attributes


class Gff3Parser(LineParser):
    """Low-level GFF3 parser, sending an attribute event per key=value pair."""

    name = "GFF3"
    header_prefixes = ("#",)
    min_tokens = 9
    max_tokens = 9
    columns = (
        Column("seqid"),
        Column("source"),
        Column("feature_type"),
        Column("start", one_based),
        Column("end", integer),
        Column("score", floating, missing=MISSING),
        Column("strand", missing=MISSING),
        Column("phase", integer, missing=MISSING))

    def header(self, line, line_number, listener):
        super().header(line, line_number, listener)
        if line.startswith(FASTA_DIRECTIVE):
            self.logger.debug("##FASTA directive, no more features")
            return False
        return True

    def parse_optional(self, tokens, line_number, listener):
        for key, values in parse_attributes(tokens[0], line_number):
            listener.attribute(key, values)


GFF3 = FORMAT = Format("GFF3", Gff3Parser, Gff3Builder)

builder = GFF3.builder
parse = GFF3.parse
stream = GFF3.stream
read = GFF3.read
from_line = GFF3.from_line
write = GFF3.write
write_record = GFF3.write_record

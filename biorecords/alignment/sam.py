"""
SAM (sequence alignment/map) text records and headers.

Header lines start with "@" and come before any alignment lines.  Each
alignment line has eleven required columns then optional tag:type:value
fields.  POS and PNEXT are kept 1-based just as in the file, with 0 meaning
"no position"; SamRecord.start gives the 0-based start for anything that
works in 0-based, half-open coordinates.

>>> from biorecords.alignment import sam
>>> with open("example.sam") as f_in:
...     hdr, records = sam.read_with_header(f_in)
"""

import re
import logging
from ..fields import MISSING, TAG
from ..format import Format
from ..listener import Collect
from ..parser import Column, LineParser, integer
from ..record import TaggedRecord, Builder, or_missing
from ..util import FormatError, check

LOGGER = logging.getLogger(__name__)

QNAME = re.compile(r"^[!-?A-~]{1,254}$")
RNAME = re.compile(r"^[0-9A-Za-z!#$%&+./:;?@^_|~-][0-9A-Za-z!#$%&*+./:;=?@^_|~-]*$")
CIGAR = re.compile(r"^([0-9]+[MIDNSHPX=])+$")
CIGAR_OP = re.compile(r"([0-9]+)([MIDNSHPX=])")
SEQ = re.compile(r"^[A-Za-z=.]+$")
QUAL = re.compile(r"^[!-~]+$")

MAX_POSITION = 2**31 - 1
# CIGAR operations that consume reference bases
REFERENCE_OPS = "MDN=X"

FLAGS = {
    "paired": 0x1,
    "proper_pair": 0x2,
    "unmapped": 0x4,
    "mate_unmapped": 0x8,
    "reverse": 0x10,
    "mate_reverse": 0x20,
    "read1": 0x40,
    "read2": 0x80,
    "secondary": 0x100,
    "qc_fail": 0x200,
    "duplicate": 0x400,
    "supplementary": 0x800,
    }


class SamRecord(TaggedRecord):
    """One SAM alignment line."""

    POSITIONAL = (
        "qname", "flag", "rname", "pos", "mapq", "cigar",
        "rnext", "pnext", "tlen", "seq", "qual")

    def validate(self):
        self._check_range("flag", 0, 2**16 - 1)
        self._check_range("pos", 0, MAX_POSITION)
        self._check_range("mapq", 0, 255)
        self._check_range("pnext", 0, MAX_POSITION)
        self._check_range("tlen", -MAX_POSITION, MAX_POSITION)
        self._check_pattern("qname", QNAME)
        self._check_pattern("rname", RNAME)
        self._check_pattern("cigar", CIGAR)
        if self.rnext != "=":
            self._check_pattern("rnext", RNAME)
        self._check_pattern("seq", SEQ)
        self._check_pattern("qual", QUAL)
        if self.seq is not None and self.qual is not None:
            check(len(self.seq) == len(self.qual),
                  "qual length must match seq length %d, was %d" % (
                      len(self.seq), len(self.qual)),
                  "qual", self.qual)

    def _check_pattern(self, name, pattern):
        value = getattr(self, name)
        if value is not None:
            check(pattern.match(value),
                  "%s must match %s, was %r" % (name, pattern.pattern, value),
                  name, value)

    @property
    def start(self):
        """0-based start on the reference, or None with no position."""
        return self.pos - 1 if self.pos else None

    @property
    def end(self):
        """0-based exclusive end on the reference, or None if unknown."""
        if self.start is None or self.cigar is None:
            return None
        return self.start + self.reference_length

    @property
    def cigar_operations(self):
        """List of (length, operation) pairs from the CIGAR string."""
        if self.cigar is None:
            return []
        return [(int(num), op) for num, op in CIGAR_OP.findall(self.cigar)]

    @property
    def reference_length(self):
        """Number of reference bases covered by the CIGAR string."""
        return sum(num for num, op in self.cigar_operations if op in REFERENCE_OPS)

    def has_flag(self, name):
        """Is the named flag bit (see FLAGS) set?"""
        return bool(self.flag & FLAGS[name])

    @property
    def is_unmapped(self):
        return self.has_flag("unmapped")

    @property
    def is_reverse(self):
        return self.has_flag("reverse")

    @property
    def is_secondary(self):
        return self.has_flag("secondary")

    @property
    def is_supplementary(self):
        return self.has_flag("supplementary")

    def to_line(self):
        tokens = [
            or_missing(self.qname),
            str(self.flag),
            or_missing(self.rname),
            str(self.pos),
            str(self.mapq),
            or_missing(self.cigar),
            or_missing(self.rnext),
            str(self.pnext),
            str(self.tlen),
            or_missing(self.seq),
            or_missing(self.qual)]
        return "\t".join(tokens + self._field_tokens())


class SamBuilder(Builder):
    """Builder for SamRecord.  Numeric columns start at 0, the rest at None."""

    record_class = SamRecord
    DEFAULTS = {"flag": 0, "pos": 0, "mapq": 0, "pnext": 0, "tlen": 0}


class SamHeaderLine:
    """One "@" header line: a record type key and its TAG:VALUE fields.

    Comment lines (@CO) hold free text instead of fields.  Fields are kept in
    file order so lines are written back as they were read.
    """

    REQUIRED = {"HD": ("VN",), "SQ": ("SN", "LN"), "RG": ("ID",), "PG": ("ID",)}

    def __init__(self, key, fields=(), text=None):
        self.key = key
        self.fields = tuple((tag, value) for tag, value in fields)
        self.text = text
        self._check()

    def _check(self):
        if len(self.key) != 2:
            raise FormatError("invalid header record type @%s" % self.key)
        tags = [tag for tag, _ in self.fields]
        for tag in self.REQUIRED.get(self.key, ()):
            if tag not in tags:
                raise FormatError(
                    "required field %s missing from @%s header line" % (tag, self.key),
                    tag=tag)
        if self.key == "SQ":
            length = self["LN"]
            if not length.isdigit() or not 1 <= int(length) <= MAX_POSITION:
                raise FormatError(
                    "invalid @SQ LN value %s" % length, tag="LN", token=length)

    @classmethod
    def from_line(cls, line, line_number=None):
        """Parse a header line, with or without its line terminator."""
        line = line.rstrip("\r\n")
        if not line.startswith("@"):
            raise FormatError(
                "header lines must start with @, was %s" % line, line_number)
        tokens = line[1:].split("\t")
        key = tokens[0]
        try:
            if key == "CO":
                return cls(key, text=line[len("@CO\t"):])
            fields = []
            for token in tokens[1:]:
                tag, sep, value = token.partition(":")
                if not sep or not TAG.match(tag):
                    raise FormatError(
                        "invalid @%s header field %s" % (key, token), token=token)
                fields.append((tag, value))
            return cls(key, fields)
        except FormatError as err:
            if line_number is None:
                raise
            raise FormatError(str(err), line_number, err.tag, err.token) from err

    def __contains__(self, tag):
        return any(key == tag for key, _ in self.fields)

    def __getitem__(self, tag):
        for key, value in self.fields:
            if key == tag:
                return value
        raise KeyError(tag)

    def get(self, tag, default=None):
        """Value for a field tag, or default if absent."""
        try:
            return self[tag]
        except KeyError:
            return default

    def to_line(self):
        """Render as one line of text without a terminator."""
        if self.key == "CO":
            return "@CO\t%s" % (self.text or "")
        return "\t".join(["@" + self.key] + ["%s:%s" % pair for pair in self.fields])

    def __str__(self):
        return self.to_line()

    def __repr__(self):
        return "SamHeaderLine(%r)" % self.to_line()

    def __eq__(self, other):
        if not isinstance(other, SamHeaderLine):
            return NotImplemented
        return (self.key, self.fields, self.text) == (other.key, other.fields, other.text)

    def __hash__(self):
        return hash((self.key, self.fields, self.text))


class SamHeader:
    """All header lines of a SAM file, in order."""

    def __init__(self, lines=()):
        self.lines = tuple(lines)

    @classmethod
    def from_lines(cls, lines):
        """Make a header from lines of text."""
        return cls(SamHeaderLine.from_line(line) for line in lines)

    def _of(self, key):
        return [line for line in self.lines if line.key == key]

    @property
    def hd(self):
        """The @HD line, or None."""
        lines = self._of("HD")
        return lines[0] if lines else None

    @property
    def sq(self):
        return self._of("SQ")

    @property
    def rg(self):
        return self._of("RG")

    @property
    def pg(self):
        return self._of("PG")

    @property
    def co(self):
        return self._of("CO")

    @property
    def sequence_lengths(self):
        """Dictionary of reference sequence lengths by name, from @SQ lines."""
        return {line["SN"]: int(line["LN"]) for line in self.sq}

    def to_lines(self):
        """List of header lines as text."""
        return [line.to_line() for line in self.lines]

    def __iter__(self):
        return iter(self.lines)

    def __len__(self):
        return len(self.lines)

    def __eq__(self, other):
        if not isinstance(other, SamHeader):
            return NotImplemented
        return self.lines == other.lines

    def __hash__(self):
        return hash(self.lines)

    def __repr__(self):
        return "SamHeader(%r)" % (list(self.lines),)


class SamHeaderBuilder:
    """Accumulate header lines into a SamHeader."""

    def __init__(self):
        self.reset()

    def with_line(self, line):
        """Add a SamHeaderLine or a line of header text."""
        if not isinstance(line, SamHeaderLine):
            line = SamHeaderLine.from_line(line)
        self.lines.append(line)
        return self

    def with_lines(self, lines):
        for line in lines:
            self.with_line(line)
        return self

    def reset(self):
        self.lines = []
        return self

    def build(self):
        return SamHeader(self.lines)


class SamParser(LineParser):
    """Low-level SAM parser.  Header lines are checked as they're read."""

    name = "SAM"
    header_prefixes = ("@",)
    columns = (
        Column("qname", missing=MISSING),
        Column("flag", integer),
        Column("rname", missing=MISSING),
        Column("pos", integer),
        Column("mapq", integer),
        Column("cigar", missing=MISSING),
        Column("rnext", missing=MISSING),
        Column("pnext", integer),
        Column("tlen", integer),
        Column("seq", missing=MISSING),
        Column("qual", missing=MISSING))

    def header(self, line, line_number, listener):
        SamHeaderLine.from_line(line, line_number)
        return super().header(line, line_number, listener)


class SamFormat(Format):
    """SAM, with header lines handled alongside the alignment records."""

    def read_with_header(self, handle):
        """Read a whole SAM stream, giving a (SamHeader, records list) tuple."""
        collect = Collect()
        self.stream(handle, collect)
        return SamHeader.from_lines(collect.headers), collect.records


def header(handle):
    """Read just the header lines from the start of a SAM stream.

    Reading stops at the first alignment line, so this is cheap for large
    files.  Blank lines are skipped.
    """
    builder = SamHeaderBuilder()
    for line_number, line in enumerate(handle, 1):
        if not line.strip():
            continue
        if not line.startswith("@"):
            break
        builder.with_line(SamHeaderLine.from_line(line, line_number))
    hdr = builder.build()
    LOGGER.debug("read %d SAM header lines", len(hdr))
    return hdr


SAM = FORMAT = SamFormat("SAM", SamParser, SamBuilder)

builder = SAM.builder
parse = SAM.parse
stream = SAM.stream
read = SAM.read
read_with_header = SAM.read_with_header
from_line = SAM.from_line
write = SAM.write
write_record = SAM.write_record

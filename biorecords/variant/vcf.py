"""
VCF (variant call format) records and headers.

Meta-information lines start with "##" and the column header line with
"#CHROM"; both come before any data lines and are handled as header lines.
Each data line has eight fixed columns (CHROM, POS, ID, REF, ALT, QUAL,
FILTER, INFO), then optionally a FORMAT column and one column per sample
named on the #CHROM line.

POS is 1-based in the file and start is 0-based here, so a POS of 0 (a
telomere) reads as a start of -1.  ID, ALT, QUAL and FILTER use "." for no
value.  INFO is a multimap like GFF3 attributes: key=value pairs separated by
semicolons with comma-separated values, and a key with no "=" is a flag whose
tuple of values is empty.  INFO text and QUAL are written back as they were
read.

>>> from biorecords.variant import vcf
>>> with open("example.vcf") as f_in:
...     hdr, records = vcf.read_with_header(f_in)
"""

import re
import logging
from collections import namedtuple
from ..fields import OptionalField
from ..format import Format
from ..listener import Collect
from ..parser import Column, LineParser, floating, one_based
from ..record import Record, Builder
from ..util import FormatError, check, format_number

LOGGER = logging.getLogger(__name__)

MISSING = "."
META_PREFIX = "##"
COLUMN_PREFIX = "#CHROM"
FIXED_COLUMNS = ("CHROM", "POS", "ID", "REF", "ALT", "QUAL", "FILTER", "INFO")
FORMAT_COLUMN = "FORMAT"
PASS = "PASS"
GENOTYPE = "GT"

REF = re.compile(r"^[ACGTNacgtn]+$")
HEADER_KEY = re.compile(r"^[A-Za-z0-9_.-]+$")
STRUCTURED = re.compile(r"^<.*ID=.+>$")
# one key=value entry of a structured <...> meta line, value optionally quoted
STRUCTURED_ENTRY = re.compile(r'\s*([^=,]+?)\s*=\s*("(?:[^"\\]|\\.)*"|[^,]*?)\s*(?:,|$)')
ALLELE_SEPARATOR = re.compile(r"[/|]")


def _split(separator):
    def decode(text):
        return tuple(text.split(separator))
    return decode

identifiers = _split(";")
alleles = _split(",")
filters = _split(";")


class VcfGenotype(namedtuple("VcfGenotype", ["sample", "format", "values"])):
    """The FORMAT values for one sample of one VCF record.

    format is the record's tuple of FORMAT keys and values the matching raw
    text values, which may stop short of the full set of keys.
    """

    __slots__ = ()

    def get(self, key, default=None):
        """Text value for a FORMAT key, or default if absent or "."."""
        if key not in self.format:
            return default
        idx = self.format.index(key)
        if idx >= len(self.values) or self.values[idx] == MISSING:
            return default
        return self.values[idx]

    def field(self, key):
        """Tuple of the comma-separated values for a FORMAT key."""
        value = self.get(key)
        if value is None:
            return ()
        return tuple(value.split(","))

    @property
    def gt(self):
        return self.get(GENOTYPE)

    @property
    def is_phased(self):
        gt = self.gt
        return gt is not None and "|" in gt

    @property
    def allele_indexes(self):
        """Tuple of allele indexes from GT, with None for ".", or None."""
        gt = self.gt
        if gt is None:
            return None
        return tuple(
            None if item == MISSING else int(item)
            for item in ALLELE_SEPARATOR.split(gt))

    def __str__(self):
        return ":".join(self.values)


class VcfRecord(Record):
    """One VCF data line.  INFO entries are held in the fields multimap."""

    POSITIONAL = (
        "chrom", "start", "id", "ref", "alt", "qual", "filter",
        "format", "genotypes")

    def __init__(self, line_number=-1, fields=None, **values):
        for name in ("id", "alt", "filter", "format"):
            value = values.get(name)
            if isinstance(value, str):
                values[name] = (value,)
            elif value is not None:
                values[name] = tuple(value)
        keys = values.get("format") or ()
        genotypes = []
        for item in values.get("genotypes") or ():
            if isinstance(item, VcfGenotype):
                sample, vals = item.sample, item.values
            else:
                sample, vals = item
            if isinstance(vals, str):
                vals = vals.split(":")
            genotypes.append(VcfGenotype(sample, keys, tuple(vals)))
        values["genotypes"] = tuple(genotypes)
        super().__init__(line_number, fields, **values)

    def validate(self):
        self._check_present("chrom")
        self._check_range("start", -1)
        self._check_present("ref")
        check(REF.match(self.ref),
              "ref must match %s, was %s" % (REF.pattern, self.ref), "ref", self.ref)
        for name in ("id", "alt", "filter"):
            for item in getattr(self, name) or ():
                check(item and item != MISSING,
                      "%s must not contain empty values" % name, name, getattr(self, name))
        self._check_range("qual", 0, optional=True)
        if self.genotypes:
            check(self.format, "format must not be missing with genotypes",
                  "format", self.format)
        if self.format and GENOTYPE in self.format:
            check(self.format[0] == GENOTYPE,
                  "format must start with GT when present, was %s" % ":".join(self.format),
                  "format", self.format)
        samples = set()
        for genotype in self.genotypes:
            check(len(genotype.values) <= len(self.format),
                  "genotype for %s has more values than format keys" % genotype.sample,
                  "genotypes", genotype.values)
            check(genotype.sample not in samples,
                  "duplicate genotype for sample %s" % genotype.sample,
                  "genotypes", genotype.sample)
            samples.add(genotype.sample)

    @property
    def pos(self):
        """1-based position, as in the file."""
        return self.start + 1

    @property
    def end(self):
        """0-based exclusive end of the reference allele."""
        return self.start + len(self.ref)

    @property
    def alleles(self):
        """Reference allele followed by any alternate alleles."""
        return (self.ref,) + (self.alt or ())

    @property
    def is_passing(self):
        return self.filter == (PASS,)

    @property
    def info(self):
        """The INFO multimap: key to a tuple of every value."""
        return self.fields

    def has_info(self, key):
        return key in self.fields

    def info_value(self, key, default=None):
        """First value of an INFO key, or default if absent or a flag."""
        values = self.fields.get(key)
        return values[0] if values else default

    def info_text(self):
        """The INFO column as text, "." when there is nothing in it."""
        if not self.fields.entries:
            return MISSING
        return ";".join(
            entry.tag if not entry.values else
            "%s=%s" % (entry.tag, ",".join(entry.values))
            for entry in self.fields.entries)

    @property
    def samples(self):
        return tuple(genotype.sample for genotype in self.genotypes)

    def genotype(self, sample):
        """The VcfGenotype for a sample name."""
        for genotype in self.genotypes:
            if genotype.sample == sample:
                return genotype
        raise KeyError(sample)

    def to_line(self):
        columns = [
            self.chrom,
            str(self.pos),
            ";".join(self.id) if self.id else MISSING,
            self.ref,
            ",".join(self.alt) if self.alt else MISSING,
            MISSING if self.qual is None else format_number(self.qual),
            ";".join(self.filter) if self.filter else MISSING,
            self.info_text()]
        if self.format is not None:
            columns.append(":".join(self.format))
            columns.extend(str(genotype) for genotype in self.genotypes)
        return "\t".join(columns)


class VcfBuilder(Builder):
    """Builder for VcfRecord."""

    record_class = VcfRecord

    def with_info(self, key, values=()):
        """Append one INFO entry.  No values makes it a flag."""
        if isinstance(values, str):
            values = (values,)
        self.entries.append(OptionalField(key, None, None, tuple(values)))
        return self

    def replace_info(self, key, values=()):
        """Replace every value for an INFO key."""
        self.entries = [entry for entry in self.entries if entry.tag != key]
        return self.with_info(key, values)

    def with_genotype(self, sample, values):
        """Append the FORMAT values for one sample.

        values is a sequence of text values or a single ":"-separated string,
        in the order of the record's format keys.
        """
        if isinstance(values, str):
            values = values.split(":")
        genotypes = tuple(self.values.get("genotypes") or ())
        self.values["genotypes"] = genotypes + ((sample, tuple(values)),)
        return self


def parse_info(text, line_number=None):
    """Parse an INFO column into a list of (key, values tuple) pairs."""
    info = []
    if text in (MISSING, ""):
        return info
    for token in text.split(";"):
        key, sep, value = token.partition("=")
        if not key:
            raise FormatError(
                "invalid VCF INFO entry %r, expected key=value or a flag" % token,
                line_number, token=token)
        info.append((key, tuple(value.split(",")) if sep else ()))
    return info


def parse_structured(text, line_number=None):
    """Parse the inside of a structured <...> meta line into (key, value) pairs.

    Quoted values are unquoted, with backslash escapes removed.
    """
    entries = []
    pos = 0
    while pos < len(text):
        match = STRUCTURED_ENTRY.match(text, pos)
        if not match or match.end() == pos:
            raise FormatError(
                "invalid VCF structured meta line entry %s" % text[pos:],
                line_number, token=text)
        key, value = match.group(1), match.group(2)
        if value.startswith('"'):
            value = re.sub(r"\\(.)", r"\1", value[1:-1])
        entries.append((key, value))
        pos = match.end()
    return tuple(entries)


def parse_column_header(line, line_number=None):
    """Check a #CHROM line and give the tuple of sample names it lists."""
    tokens = line.rstrip("\r\n")[1:].split("\t")
    if tuple(tokens[:len(FIXED_COLUMNS)]) != FIXED_COLUMNS:
        raise FormatError(
            "invalid VCF column header, expected %s" % "\t".join(FIXED_COLUMNS),
            line_number)
    rest = tokens[len(FIXED_COLUMNS):]
    if not rest:
        return ()
    if rest[0] != FORMAT_COLUMN:
        raise FormatError(
            "invalid VCF column header, expected FORMAT after INFO, found %s" % rest[0],
            line_number)
    samples = tuple(rest[1:])
    if len(set(samples)) != len(samples):
        raise FormatError("duplicate sample names in VCF column header", line_number)
    return samples


class VcfHeaderLine:
    """One "##key=value" meta-information line.

    The value is kept as text so the line is written back as it was read.
    Structured values (<ID=...,Description="...">) can be read as fields.
    """

    def __init__(self, key, value):
        if not HEADER_KEY.match(key):
            raise FormatError("invalid VCF meta line key %s" % key, token=key)
        self.key = key
        self.value = value
        self.fields = ()
        if self.is_structured:
            self.fields = parse_structured(value[1:-1])

    @classmethod
    def from_line(cls, line, line_number=None):
        """Parse a meta line, with or without its line terminator."""
        line = line.rstrip("\r\n")
        if not line.startswith(META_PREFIX):
            raise FormatError(
                "VCF meta lines must start with ##, was %s" % line, line_number)
        key, sep, value = line[len(META_PREFIX):].partition("=")
        if not sep:
            raise FormatError(
                "invalid VCF meta line %s, expected ##key=value" % line, line_number)
        try:
            return cls(key, value)
        except FormatError as err:
            if line_number is None:
                raise
            raise FormatError(str(err), line_number, err.tag, err.token) from err

    @property
    def is_structured(self):
        return bool(STRUCTURED.match(self.value))

    @property
    def id(self):
        return self.get("ID")

    def __contains__(self, name):
        return any(key == name for key, _ in self.fields)

    def __getitem__(self, name):
        for key, value in self.fields:
            if key == name:
                return value
        raise KeyError(name)

    def get(self, name, default=None):
        """Value of a structured field, or default if absent."""
        try:
            return self[name]
        except KeyError:
            return default

    def to_line(self):
        return "%s%s=%s" % (META_PREFIX, self.key, self.value)

    def __str__(self):
        return self.to_line()

    def __repr__(self):
        return "VcfHeaderLine(%r)" % self.to_line()

    def __eq__(self, other):
        if not isinstance(other, VcfHeaderLine):
            return NotImplemented
        return (self.key, self.value) == (other.key, other.value)

    def __hash__(self):
        return hash((self.key, self.value))


class VcfHeader:
    """The meta lines and sample names of a VCF file."""

    def __init__(self, lines=(), samples=()):
        self.lines = tuple(lines)
        self.samples = tuple(samples)

    @classmethod
    def from_lines(cls, lines):
        """Make a header from lines of text, including the #CHROM line."""
        meta = []
        samples = ()
        for line in lines:
            if line.startswith(META_PREFIX):
                meta.append(VcfHeaderLine.from_line(line))
            elif line.startswith(COLUMN_PREFIX):
                samples = parse_column_header(line)
            else:
                raise FormatError("invalid VCF header line %s" % line)
        return cls(meta, samples)

    def _of(self, key):
        return [line for line in self.lines if line.key == key]

    def _by_id(self, key):
        return {line.id: line for line in self._of(key)}

    @property
    def fileformat(self):
        """The fileformat version string, or None."""
        lines = self._of("fileformat")
        return lines[0].value if lines else None

    @property
    def info(self):
        """INFO meta lines by ID."""
        return self._by_id("INFO")

    @property
    def format(self):
        """FORMAT meta lines by ID."""
        return self._by_id("FORMAT")

    @property
    def filter(self):
        return self._by_id("FILTER")

    @property
    def contig(self):
        return self._by_id("contig")

    @property
    def contig_lengths(self):
        """Dictionary of contig lengths by name, for contigs that give one."""
        return {
            name: int(line["length"]) for name, line in self.contig.items()
            if "length" in line}

    def column_header(self):
        """The #CHROM line as text."""
        columns = list(FIXED_COLUMNS)
        if self.samples:
            columns += [FORMAT_COLUMN] + list(self.samples)
        return "#" + "\t".join(columns)

    def to_lines(self):
        """List of header lines as text, ending with the #CHROM line."""
        return [line.to_line() for line in self.lines] + [self.column_header()]

    def __iter__(self):
        return iter(self.lines)

    def __len__(self):
        return len(self.lines)

    def __eq__(self, other):
        if not isinstance(other, VcfHeader):
            return NotImplemented
        return (self.lines, self.samples) == (other.lines, other.samples)

    def __hash__(self):
        return hash((self.lines, self.samples))

    def __repr__(self):
        return "VcfHeader(%r, %r)" % (list(self.lines), self.samples)


class VcfParser(LineParser):
    """Low-level VCF parser.

    Besides the column events there is an info event per INFO entry, a
    format event with the FORMAT keys, and a genotype event per sample.
    Sample names come from the #CHROM line, so data lines with sample
    columns need one before them.
    """

    name = "VCF"
    header_prefixes = ("#",)
    min_tokens = len(FIXED_COLUMNS)
    columns = (
        Column("chrom"),
        Column("start", one_based),
        Column("id", identifiers, missing=MISSING),
        Column("ref"),
        Column("alt", alleles, missing=MISSING),
        Column("qual", floating, missing=MISSING),
        Column("filter", filters, missing=MISSING))

    def __init__(self):
        super().__init__()
        self.samples = None

    def header(self, line, line_number, listener):
        if line.startswith(META_PREFIX):
            VcfHeaderLine.from_line(line, line_number)
        elif line.startswith(COLUMN_PREFIX):
            self.samples = parse_column_header(line, line_number)
            self.logger.debug("%d samples", len(self.samples))
        else:
            raise FormatError("invalid VCF header line %s" % line, line_number)
        return super().header(line, line_number, listener)

    def parse_optional(self, tokens, line_number, listener):
        for key, values in parse_info(tokens[0], line_number):
            listener.info(key, values)
        if len(tokens) > 1:
            listener.format(tuple(tokens[1].split(":")))
        values = tokens[2:]
        if self.samples is None:
            if values:
                raise FormatError(
                    "VCF sample columns without a #CHROM header line", line_number)
            return
        if len(values) != len(self.samples):
            raise FormatError(
                "expected %d VCF sample columns, found %d" % (
                    len(self.samples), len(values)),
                line_number)
        for sample, token in zip(self.samples, values):
            listener.genotype(sample, tuple(token.split(":")))


class VcfFormat(Format):
    """VCF, with meta lines and sample names handled as a VcfHeader."""

    def read_with_header(self, handle):
        """Read a whole VCF stream, giving a (VcfHeader, records list) tuple."""
        collect = Collect()
        self.stream(handle, collect)
        return VcfHeader.from_lines(collect.headers), collect.records


def header(handle):
    """Read just the header lines from the start of a VCF stream.

    Reading stops at the first data line.  Blank lines are skipped.
    """
    meta = []
    samples = ()
    for line_number, line in enumerate(handle, 1):
        if not line.strip():
            continue
        if line.startswith(META_PREFIX):
            meta.append(VcfHeaderLine.from_line(line, line_number))
        elif line.startswith(COLUMN_PREFIX):
            samples = parse_column_header(line, line_number)
        else:
            break
    hdr = VcfHeader(meta, samples)
    LOGGER.debug("read %d VCF meta lines, %d samples", len(hdr), len(samples))
    return hdr


VCF = FORMAT = VcfFormat("VCF", VcfParser, VcfBuilder)

builder = VCF.builder
parse = VCF.parse
stream = VCF.stream
read = VCF.read
read_with_header = VCF.read_with_header
from_line = VCF.from_line
write = VCF.write
write_record = VCF.write_record

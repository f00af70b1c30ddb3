"""
BED records in the BED3, BED4, BED5, BED6 and BED12 layouts.

Coordinates are 0-based and half-open, as in the file.  The number of columns
a record was read with is kept in its "columns" attribute and decides how many
columns it is written with.  In BED4+ a name of "." means no name, in BED6+ a
strand of "." means no strand, and in BED12 an itemRgb of "0" means no color.

Block lists are written without the trailing comma some tools add, and RGB
components without leading zeros.
"""

import re
from ..format import Format
from ..parser import Column, LineParser, integer, integers
from ..record import Record, Builder, or_missing
from ..util import FormatError, check

MISSING = "."
NO_COLOR = "0"
LAYOUTS = (3, 4, 5, 6, 12)
CHROM = re.compile(r"^[!-~]{1,255}$")
NAME = re.compile(r"^[\x20-\x7e]{1,255}$")
RGB = re.compile(r"^[0-9]{1,3},[0-9]{1,3},[0-9]{1,3}$")


def rgb(text):
    """Decode an R,G,B color into a tuple of three integers."""
    if not RGB.match(text):
        raise ValueError("itemRgb must be in R,G,B format, e.g. 255,0,0")
    return tuple(int(part) for part in text.split(","))


def infer_columns(values):
    """The smallest layout that can hold every value that's set."""
    for count, name in (
            (12, "block_count"), (12, "block_sizes"), (12, "block_starts"),
            (12, "thick_start"), (12, "thick_end"), (12, "item_rgb"),
            (6, "strand"), (5, "score"), (4, "name")):
        if values.get(name) is not None:
            return count
    return 3


class BedRecord(Record):
    """One BED feature line."""

    POSITIONAL = (
        "chrom", "start", "end", "name", "score", "strand",
        "thick_start", "thick_end", "item_rgb",
        "block_count", "block_sizes", "block_starts", "columns")

    def __init__(self, line_number=-1, fields=None, **values):
        if values.get("columns") is None:
            values["columns"] = infer_columns(values)
        for name in ("block_sizes", "block_starts"):
            if values.get(name) is not None:
                values[name] = tuple(values[name])
        if values.get("item_rgb") is not None:
            values["item_rgb"] = tuple(values["item_rgb"])
        super().__init__(line_number, fields, **values)

    def validate(self):
        self._check_choice("columns", LAYOUTS)
        self._check_present("chrom")
        check(CHROM.match(self.chrom),
              "chrom must be 1-255 printable characters without spaces, was %r" % (
                  self.chrom,),
              "chrom", self.chrom)
        self._check_span("start", "end")
        if self.columns >= 4 and self.name is not None:
            check(NAME.match(self.name),
                  "name must not contain control characters, was %r" % (self.name,),
                  "name", self.name)
        if self.columns >= 5:
            self._check_range("score", 0, 1000)
        if self.columns >= 6:
            self._check_choice("strand", ("+", "-"), optional=True)
        if self.columns == 12:
            self._validate_thick()
            self._validate_blocks()

    def _validate_thick(self):
        self._check_range("thick_start", self.start, self.end)
        self._check_range("thick_end", self.thick_start, self.end)
        if self.item_rgb is not None:
            check(len(self.item_rgb) == 3 and all(0 <= c <= 255 for c in self.item_rgb),
                  "itemRgb color values must be in [0, 255], was %r" % (self.item_rgb,),
                  "item_rgb", self.item_rgb)

    def _validate_blocks(self):
        self._check_range("block_count", 1)
        self._check_present("block_sizes")
        self._check_present("block_starts")
        check(len(self.block_sizes) == self.block_count,
              "block_sizes must have block_count (%d) values, had %d" % (
                  self.block_count, len(self.block_sizes)),
              "block_sizes", self.block_sizes)
        check(len(self.block_starts) == self.block_count,
              "block_starts must have block_count (%d) values, had %d" % (
                  self.block_count, len(self.block_starts)),
              "block_starts", self.block_starts)
        check(self.block_starts[0] == 0,
              "first block must start at start, was %d" % self.block_starts[0],
              "block_starts", self.block_starts)
        check(self.start + self.block_starts[-1] + self.block_sizes[-1] == self.end,
              "last block must end at end", "block_sizes", self.block_sizes)
        last_end = 0
        for block_start, block_size in zip(self.block_starts, self.block_sizes):
            check(block_size >= 0, "block size must be at least zero, was %d" % block_size,
                  "block_sizes", self.block_sizes)
            check(block_start >= last_end,
                  "blocks must be sorted and must not overlap",
                  "block_starts", self.block_starts)
            check(self.start + block_start + block_size <= self.end,
                  "block at %d extends beyond end" % block_start,
                  "block_starts", self.block_starts)
            last_end = block_start + block_size

    @property
    def length(self):
        return self.end - self.start

    @property
    def blocks(self):
        """List of (start, end) pairs for each block, in chromosome coordinates."""
        if not self.block_starts:
            return [(self.start, self.end)]
        return [
            (self.start + start, self.start + start + size)
            for start, size in zip(self.block_starts, self.block_sizes)]

    def to_line(self):
        tokens = [self.chrom, str(self.start), str(self.end)]
        if self.columns >= 4:
            tokens.append(or_missing(self.name, MISSING))
        if self.columns >= 5:
            tokens.append(str(self.score))
        if self.columns >= 6:
            tokens.append(or_missing(self.strand, MISSING))
        if self.columns == 12:
            color = NO_COLOR
            if self.item_rgb is not None:
                color = ",".join(str(c) for c in self.item_rgb)
            tokens.extend([
                str(self.thick_start),
                str(self.thick_end),
                color,
                str(self.block_count),
                ",".join(str(size) for size in self.block_sizes),
                ",".join(str(start) for start in self.block_starts)])
        return "\t".join(tokens)


class BedBuilder(Builder):
    """Builder for BedRecord.  The layout is inferred if not given."""

    record_class = BedRecord


class BedParser(LineParser):
    """Low-level BED parser.  Sends a columns event with each line's layout."""

    name = "BED"
    header_prefixes = ("#", "track", "browser")
    columns = (
        Column("chrom"),
        Column("start", integer),
        Column("end", integer),
        Column("name", missing=MISSING),
        Column("score", integer),
        Column("strand", missing=MISSING),
        Column("thick_start", integer),
        Column("thick_end", integer),
        Column("item_rgb", rgb, missing=NO_COLOR),
        Column("block_count", integer),
        Column("block_sizes", integers),
        Column("block_starts", integers))

    def check_tokens(self, tokens, line_number):
        if len(tokens) not in LAYOUTS:
            raise FormatError(
                "invalid BED record, expected 3, 4, 5, 6 or 12 tokens, found %d" % len(tokens),
                line_number)

    def begin_record(self, tokens, line_number, listener):
        listener.columns(len(tokens))

    @classmethod
    def events(cls):
        return ["columns"] + super().events()


BED = FORMAT = Format("BED", BedParser, BedBuilder)

builder = BED.builder
parse = BED.parse
stream = BED.stream
read = BED.read
from_line = BED.from_line
write = BED.write
write_record = BED.write_record

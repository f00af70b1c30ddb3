"""
GAF (graph alignment format) records, as written by GraphAligner and vg.

Twelve required columns, like PAF but aligning against a path through a
graph, then optional tag:type:value fields:

    read1  6  0  6  +  chr1  17  7  13  6  6  60  cg:Z:6M

Query and path names may be "*" for unknown, read in as None.
"""

from ..fields import MISSING
from ..format import Format
from ..parser import Column, LineParser, integer, character
from ..record import TaggedRecord, Builder, or_missing


class GafRecord(TaggedRecord):
    """One GAF alignment line."""

    POSITIONAL = (
        "query_name", "query_length", "query_start", "query_end", "strand",
        "path_name", "path_length", "path_start", "path_end",
        "matches", "alignment_block_length", "mapping_quality")

    def validate(self):
        for name in ("query_length", "path_length", "matches", "alignment_block_length"):
            self._check_range(name, 0)
        self._check_span("query_start", "query_end")
        self._check_span("path_start", "path_end")
        self._check_choice("strand", ("+", "-"))
        self._check_range("mapping_quality", 0, 255)

    def to_line(self):
        tokens = [
            or_missing(self.query_name),
            str(self.query_length),
            str(self.query_start),
            str(self.query_end),
            self.strand,
            or_missing(self.path_name),
            str(self.path_length),
            str(self.path_start),
            str(self.path_end),
            str(self.matches),
            str(self.alignment_block_length),
            str(self.mapping_quality)]
        return "\t".join(tokens + self._field_tokens())


class GafBuilder(Builder):
    """Builder for GafRecord.  Strand defaults to + and mapping quality to 255."""

    record_class = GafRecord
    DEFAULTS = {
        "query_length": 0, "query_start": 0, "query_end": 0, "strand": "+",
        "path_length": 0, "path_start": 0, "path_end": 0,
        "matches": 0, "alignment_block_length": 0, "mapping_quality": 255}


class GafParser(LineParser):
    """Low-level GAF parser, sending one event per column and optional field."""

    name = "GAF"
    columns = (
        Column("query_name", missing=MISSING),
        Column("query_length", integer),
        Column("query_start", integer),
        Column("query_end", integer),
        Column("strand", character),
        Column("path_name", missing=MISSING),
        Column("path_length", integer),
        Column("path_start", integer),
        Column("path_end", integer),
        Column("matches", integer),
        Column("alignment_block_length", integer),
        Column("mapping_quality", integer))


GAF = FORMAT = Format("GAF", GafParser, GafBuilder)

builder = GAF.builder
parse = GAF.parse
stream = GAF.stream
read = GAF.read
from_line = GAF.from_line
write = GAF.write
write_record = GAF.write_record

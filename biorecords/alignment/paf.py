"""
PAF (pairwise mapping format) records, as written by minimap2.

Twelve required columns then optional tag:type:value fields.  Unlike GAF,
query and target names are required.
"""

from ..format import Format
from ..parser import Column, LineParser, integer, character
from ..record import TaggedRecord, Builder


class PafRecord(TaggedRecord):
    """One PAF alignment line."""

    POSITIONAL = (
        "query_name", "query_length", "query_start", "query_end", "strand",
        "target_name", "target_length", "target_start", "target_end",
        "matches", "alignment_block_length", "mapping_quality")

    def validate(self):
        self._check_present("query_name")
        self._check_present("target_name")
        for name in ("query_length", "target_length", "matches", "alignment_block_length"):
            self._check_range(name, 0)
        self._check_span("query_start", "query_end")
        self._check_span("target_start", "target_end")
        self._check_choice("strand", ("+", "-"))
        self._check_range("mapping_quality", 0, 255)

    @property
    def identity(self):
        """Fraction of the alignment block that is residue matches."""
        if not self.alignment_block_length:
            return None
        return self.matches / self.alignment_block_length

    def to_line(self):
        tokens = [str(getattr(self, name)) for name in self.POSITIONAL]
        return "\t".join(tokens + self._field_tokens())


class PafBuilder(Builder):
    """Builder for PafRecord.  Strand defaults to + and mapping quality to 255."""

    record_class = PafRecord
    DEFAULTS = {
        "query_length": 0, "query_start": 0, "query_end": 0, "strand": "+",
        "target_length": 0, "target_start": 0, "target_end": 0,
        "matches": 0, "alignment_block_length": 0, "mapping_quality": 255}


class PafParser(LineParser):
    """Low-level PAF parser."""

    name = "PAF"
    columns = (
        Column("query_name"),
        Column("query_length", integer),
        Column("query_start", integer),
        Column("query_end", integer),
        Column("strand", character),
        Column("target_name"),
        Column("target_length", integer),
        Column("target_start", integer),
        Column("target_end", integer),
        Column("matches", integer),
        Column("alignment_block_length", integer),
        Column("mapping_quality", integer))


PAF = FORMAT = Format("PAF", PafParser, PafBuilder)

builder = PAF.builder
parse = PAF.parse
stream = PAF.stream
read = PAF.read
from_line = PAF.from_line
write = PAF.write
write_record = PAF.write_record

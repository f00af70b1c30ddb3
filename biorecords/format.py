"""
One object per file format, bundling its parser, builder and writer.

Each format module creates a Format and re-exports its bound methods as
module-level functions, so these are equivalent:

    from biorecords.alignment import gaf
    gaf.read(handle)
    gaf.GAF.read(handle)
"""

from .listener import Collect, as_listener
from .parser import BuilderAdapter
from .util import FormatError
from .writer import write_record, write_records, write_lines


class Format:
    """A delimited text format: how to parse, build and write its records."""

    def __init__(self, name, parser_class, builder_class, adapter_class=BuilderAdapter):
        self.name = name
        self.parser_class = parser_class
        self.builder_class = builder_class
        self.adapter_class = adapter_class

    def __repr__(self):
        return "Format(%r)" % self.name

    def builder(self, record=None):
        """A new builder, pre-populated from a record if one is given."""
        if record is not None:
            return self.builder_class.from_record(record)
        return self.builder_class()

    def parser(self):
        """A new low-level parser.  Each parse needs its own."""
        return self.parser_class()

    def adapter(self, listener):
        """A ParseListener that builds records and passes them to listener."""
        return self.adapter_class(self.builder(), listener)

    def parse(self, handle, listener):
        """Parse a text stream, sending low-level events to a ParseListener."""
        return self.parser().parse(handle, listener)

    def stream(self, handle, listener):
        """Parse a text stream, sending each record to a listener.

        listener may be a RecordListener or a plain callable taking a record.
        Either can return False to stop parsing after the current record.
        """
        return self.parser().parse(handle, self.adapter(as_listener(listener)))

    def read(self, handle):
        """Read every record in a text stream into a list.

        This holds the whole input in memory; use stream for large inputs.
        """
        collect = Collect()
        self.stream(handle, collect)
        return collect.records

    def from_line(self, line):
        """Parse a single line of text into a record."""
        records = self.read([line])
        if len(records) != 1:
            raise FormatError(
                "expected one %s record, found %d" % (self.name, len(records)))
        return records[0]

    def write(self, records, handle, headers=None):
        """Write header lines (if any) and then records to a text handle."""
        if headers:
            write_lines(headers, handle)
        return write_records(records, handle)

    def write_record(self, record, handle):
        """Write one record to a text handle."""
        write_record(record, handle)

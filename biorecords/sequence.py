"""
FASTA and FASTQ, read and written with Biopython's SeqIO.

These multi-line formats don't fit the one-line-per-record parsers, so records
are Biopython SeqRecord objects, but they go through the same listener
protocol: a listener's record() may return False to stop reading.
"""

import logging
from Bio import SeqIO
from .listener import Collect, as_listener
from .util import FormatError

LOGGER = logging.getLogger(__name__)


class SequenceFormat:
    """A sequence file format known to Bio.SeqIO."""

    def __init__(self, name):
        self.name = name

    def __repr__(self):
        return "SequenceFormat(%r)" % self.name

    def stream(self, handle, listener):
        """Pass each SeqRecord to a listener, returning the count read.

        Malformed input raises FormatError.
        """
        listener = as_listener(listener)
        records = SeqIO.parse(handle, self.name)
        count = 0
        while True:
            try:
                record = next(records)
            except StopIteration:
                break
            except ValueError as err:
                raise FormatError(
                    "invalid %s record after %d records: %s" % (self.name, count, err)) from err
            count += 1
            if listener.record(record) is False:
                LOGGER.debug("stopped by listener after %d %s records", count, self.name)
                break
        return count

    def read(self, handle):
        """Read every SeqRecord in a stream into a list."""
        collect = Collect()
        self.stream(handle, collect)
        return collect.records

    def write(self, records, handle):
        """Write SeqRecords to a text handle, returning the count written."""
        return SeqIO.write(records, handle, self.name)

    def write_record(self, record, handle):
        """Write one SeqRecord."""
        SeqIO.write(record, handle, self.name)


FASTA = SequenceFormat("fasta")
FASTQ = SequenceFormat("fastq")

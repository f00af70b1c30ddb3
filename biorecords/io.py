"""
Reading and writing files by path, picking the format from the file name.

File suffixes for each format come from the "formats" section of the
configuration, so extra suffixes can be added there.  Compressed files are
not handled here; open them yourself and use the format objects directly.
"""

import logging
from pathlib import Path
from . import CONFIG
from .alignment import gaf, paf, sam
from .assembly import gfa1
from .feature import gff3, bed
from .variant import vcf
from . import sequence

LOGGER = logging.getLogger(__name__)

FORMATS = {
    "gaf": gaf.GAF,
    "paf": paf.PAF,
    "sam": sam.SAM,
    "gff3": gff3.GFF3,
    "bed": bed.BED,
    "gfa1": gfa1.GFA1,
    "vcf": vcf.VCF,
    "fasta": sequence.FASTA,
    "fastq": sequence.FASTQ,
    }


def get_format(name):
    """Get a format object by name (case-insensitive)."""
    try:
        return FORMATS[name.lower()]
    except KeyError:
        raise ValueError("unknown format %r, expected one of %s" % (
            name, ", ".join(sorted(FORMATS)))) from None

def format_for_path(path, formats=None):
    """Get the format object for a file path from its suffix."""
    if formats is None:
        formats = CONFIG.get("formats", {})
    suffix = Path(path).suffix.lower()
    for name, suffixes in formats.items():
        if suffix in [s.lower() for s in suffixes]:
            LOGGER.debug("using format %s for %s", name, path)
            return get_format(name)
    raise ValueError("no known format for file suffix %r (%s)" % (suffix, path))

def _format(path, fmt):
    if fmt is None:
        return format_for_path(path)
    if isinstance(fmt, str):
        return get_format(fmt)
    return fmt

def stream_path(path, listener, fmt=None):
    """Stream the records in a file to a listener."""
    fmt = _format(path, fmt)
    with open(path) as f_in:
        return fmt.stream(f_in, listener)

def read_path(path, fmt=None):
    """Read every record in a file into a list."""
    fmt = _format(path, fmt)
    with open(path) as f_in:
        return fmt.read(f_in)

def write_path(path, records, fmt=None, headers=None):
    """Write records (after any header lines) to a file, replacing it."""
    fmt = _format(path, fmt)
    with open(path, "wt") as f_out:
        if headers:
            return fmt.write(records, f_out, headers)
        return fmt.write(records, f_out)

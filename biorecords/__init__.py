"""
Package for reading and writing line-oriented bioinformatics formats.

Brief package structure overview:

Each format module (alignment.gaf, alignment.paf, alignment.sam, feature.gff3,
feature.bed, assembly.gfa1, variant.vcf) defines an immutable record class
with a matching builder, a low-level parser that reports one event per
field, a streaming parser that assembles those events into records, and a
writer for the reverse direction.  The shared machinery lives in a handful of
modules: fields handles the "tag:type:value" optional field convention,
record holds the record and builder base classes, parser holds the
line-by-line state machine, listener the record callbacks that decide what
happens to each record, and writer the output side.  sequence handles FASTA
and FASTQ via Biopython, and io picks a format for a file path using the
configured suffixes.
"""

import logging
from . import config
CONFIG = config.layer_configs(config.default_paths())

if CONFIG.get("loglevel") is not None:
    logging.getLogger(__name__).setLevel(CONFIG["loglevel"])

def __deduce_version():
    """Return version string for this package, if installed.

    This infers the version originally defined in setup.py, but only if it can
    find an installed package and the filesystem path for the loaded package
    agrees with it.
    """
    from importlib.metadata import version, files, PackageNotFoundError
    from pathlib import Path
    try:
        # Is there an installed package matching this package name, *and* does
        # that package refer to this very file we're currently in?  If so,
        # return that version string, but in any other case, return an empty
        # string.
        ver = version(__package__)
        this = [p for p in (files(__package__) or [])
                if p.locate().exists() and Path(__file__).samefile(p.locate())]
        if this:
            return ver
    except PackageNotFoundError:
        pass
    return ""

__version__ = __deduce_version()

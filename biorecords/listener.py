"""
Record listeners: what happens to each record as it comes off a parser.

A listener's record() method is called once per record and returns whether
parsing should continue.  Only an explicit False stops the parser, so a
method that returns nothing keeps it going.  Plain functions can be used
anywhere a listener is expected; see as_listener.
"""

import logging
from . import CONFIG

LOGGER = logging.getLogger(__name__)


class RecordListener:
    """Base class for record listeners."""

    def record(self, record):
        """Handle one record.  Return False to stop parsing."""
        raise NotImplementedError

    def header(self, line):
        """Handle one header line.  Ignored by default."""


class FunctionListener(RecordListener):
    """Wrap a callable taking a record as a listener."""

    def __init__(self, func):
        self.func = func

    def record(self, record):
        return self.func(record)


def as_listener(obj):
    """Give a RecordListener for a listener object or a plain callable.

    An object with a record method but no header method has its header lines
    ignored.
    """
    if hasattr(obj, "record"):
        if not hasattr(obj, "header"):
            return FunctionListener(obj.record)
        return obj
    if callable(obj):
        return FunctionListener(obj)
    raise TypeError("not a record listener: %r" % (obj,))


class Collect(RecordListener):
    """Append every record to a list, and every header line to another.

    Everything is kept in memory.  A warning is logged once the record count
    passes the configured collect.warn_after.
    """

    def __init__(self, warn_after=None):
        if warn_after is None:
            warn_after = CONFIG.get("collect", {}).get("warn_after", 0)
        self.warn_after = warn_after
        self.records = []
        self.headers = []

    def header(self, line):
        self.headers.append(line)

    def record(self, record):
        self.records.append(record)
        if self.warn_after and len(self.records) == self.warn_after + 1:
            LOGGER.warning(
                "collected more than %d records in memory", self.warn_after)
        return True


class FilterListener(RecordListener):
    """Forward only the records a predicate accepts."""

    def __init__(self, predicate, listener):
        self.predicate = predicate
        self.listener = as_listener(listener)

    def header(self, line):
        self.listener.header(line)

    def record(self, record):
        if self.predicate(record):
            return self.listener.record(record)
        return True


class HeadListener(RecordListener):
    """Forward at most count records, then stop the parser."""

    def __init__(self, count, listener):
        if count < 0:
            raise ValueError("count must be at least 0, was %d" % count)
        self.count = count
        self.seen = 0
        self.listener = as_listener(listener)

    def header(self, line):
        self.listener.header(line)

    def record(self, record):
        if self.seen >= self.count:
            return False
        self.seen += 1
        if self.listener.record(record) is False:
            return False
        return self.seen < self.count


class WriterListener(RecordListener):
    """Write each record (and optionally each header line) to a text handle."""

    def __init__(self, handle, headers=True):
        self.handle = handle
        self.headers = headers
        self.count = 0

    def header(self, line):
        if self.headers:
            self.handle.write(line + "\n")

    def record(self, record):
        self.handle.write(record.to_line() + "\n")
        self.count += 1
        return True

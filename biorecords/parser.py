"""
The single-pass, line-oriented parser shared by every delimited format.

A LineParser subclass describes a format as a table of positional Columns plus
a few class attributes (delimiter, header prefixes, token counts).  For each
line it validates the token count, then walks the tokens left to right:

 * each positional token is decoded by its Column and sent as an event named
   after that column, skipped entirely when the token is the column's missing
   sentinel;
 * each remaining token is decoded as a tag:type:value optional field and
   sent as a field or array_field event;
 * complete() is called once the line is done, and a False return stops the
   parse before the next line is read.

Events go to a ParseListener.  BuilderAdapter turns those events into calls on
a record Builder and hands each finished record to a RecordListener, which is
the level most code works at.
"""

import logging
from enum import Enum
from .fields import FLOAT, TYPES, parse_field
from .listener import Collect, as_listener
from .logging import ParseLoggerAdapter
from .util import FormatError, TextFloat, ValidationError, split_line

LOGGER = logging.getLogger(__name__)


class ParserState(Enum):
    """Where a LineParser is in its per-line loop."""
    AWAITING_LINE = "awaiting line"
    POSITIONAL = "parsing positional fields"
    OPTIONAL = "parsing optional fields"
    COMPLETE = "record complete"
    END_OF_STREAM = "end of stream"
    ERROR = "error"


# Column decoders.  Each takes the raw token and raises ValueError if it
# can't be read.

def integer(text):
    """Decode a plain decimal integer (no whitespace, no underscores)."""
    stripped = text[1:] if text[:1] in "+-" else text
    if not stripped.isdigit() or not stripped.isascii():
        raise ValueError("not an integer")
    return int(text)

def floating(text):
    """Decode a decimal float, keeping its text for writing back out.

    Only plain decimal notation is accepted, so no underscores, nan or inf.
    """
    if not FLOAT.match(text):
        raise ValueError("not a float")
    return TextFloat(text)

def character(text):
    """Decode a single character."""
    if len(text) != 1:
        raise ValueError("not a single character")
    return text

def one_based(text):
    """Decode a 1-based coordinate into a 0-based one."""
    return integer(text) - 1

def integers(text):
    """Decode a comma-separated list of integers, allowing a trailing comma."""
    if text.endswith(","):
        text = text[:-1]
    return tuple(integer(item) for item in text.split(","))


class Column:
    """One positional column of a delimited format.

    name is both the record attribute and the listener event the decoded value
    is sent to.  decode turns the token text into a value.  missing is the
    sentinel token meaning "no value", or None if the column is required.
    """

    def __init__(self, name, decode=str, missing=None):
        self.name = name
        self.decode = decode
        self.missing = missing

    def is_missing(self, token):
        """Is this token the column's missing-value sentinel?"""
        return self.missing is not None and token == self.missing

    def read(self, token, line_number=None):
        """Decode a token, giving None for the missing sentinel."""
        if self.is_missing(token):
            return None
        try:
            return self.decode(token)
        except FormatError:
            raise
        except ValueError as err:
            raise FormatError(
                "invalid %s value %s, %s" % (self.name, token, err),
                line_number, token=token) from err

    def __repr__(self):
        return "Column(%r)" % self.name


class ParseListener:
    """Low-level parse events for a single line.

    Besides the methods here, a listener receives one event per positional
    column, named after the column and given the decoded value.
    """

    def header(self, line):
        """A header line, without its line terminator."""
        raise NotImplementedError

    def line_number(self, line_number):
        """The 1-based number of the line about to be parsed."""
        raise NotImplementedError

    def field(self, tag, type_code, value):
        """A scalar optional field, with its value as text."""
        raise NotImplementedError

    def array_field(self, tag, type_code, array_type, values):
        """A B-type optional field, with its element type and element texts."""
        raise NotImplementedError

    def complete(self):
        """The line is done.  Return False to stop parsing."""
        raise NotImplementedError


class ParseAdapter(ParseListener):
    """A ParseListener that ignores every event.

    Subclass this and override just the events of interest.  Column events
    without a method of their own are ignored as well.
    """

    def __getattr__(self, name):
        if name.startswith("_"):
            raise AttributeError(name)
        return _ignore

    def header(self, line):
        pass

    def line_number(self, line_number):
        pass

    def field(self, tag, type_code, value):
        pass

    def array_field(self, tag, type_code, array_type, values):
        pass

    def complete(self):
        return True


def _ignore(*args, **kwargs):
    pass


class BuilderAdapter(ParseAdapter):
    """Assemble parse events into records and pass them to a RecordListener.

    Every column event becomes a with_<column> call on the builder.  When the
    line completes the record is built, the builder is reset for the next line
    whatever happens, and the record goes to listener.record().  A record that
    fails validation is reported as a FormatError for its line.
    """

    def __init__(self, builder, listener):
        self.builder = builder
        self.listener = as_listener(listener)

    def __getattr__(self, name):
        if name.startswith("_"):
            raise AttributeError(name)
        return getattr(self.builder, "with_" + name)

    def header(self, line):
        self.listener.header(line)

    def line_number(self, line_number):
        self.builder.with_line_number(line_number)

    def field(self, tag, type_code, value):
        self.builder.with_field(tag, type_code, value)

    def array_field(self, tag, type_code, array_type, values):
        self.builder.with_array_field(tag, type_code, array_type, values)

    def complete(self):
        try:
            record = self.builder.build()
        except ValidationError as err:
            raise FormatError(
                "invalid record: %s" % err, self.builder.line_number) from err
        finally:
            self.builder.reset()
        return self.listener.record(record) is not False


class LineParser:
    """Table-driven parser for one tab-delimited format.

    Subclasses set:

    name: short format name for messages
    columns: sequence of Column, in file order
    header_prefixes: tuple of line prefixes that mark header lines
    min_tokens: fewest tokens a record line may have (default: len(columns))
    max_tokens: most tokens a record line may have (default: no limit)
    field_types: optional field type codes the format allows
    """

    name = None
    columns = ()
    delimiter = "\t"
    header_prefixes = ()
    min_tokens = None
    max_tokens = None
    field_types = TYPES

    def __init__(self):
        self.state = ParserState.AWAITING_LINE
        self.logger = ParseLoggerAdapter(LOGGER, {"format": self})

    def parse(self, handle, listener):
        """Parse every line of a text stream, sending events to listener.

        Returns the number of lines read.  Parsing stops early, without
        reading further lines, if listener.complete() returns False.
        """
        self.logger = ParseLoggerAdapter(LOGGER, {"format": self, "source": handle})
        self.logger.debug("parsing %s", self.name)
        self.state = ParserState.AWAITING_LINE
        line_number = 0
        try:
            for line in handle:
                line_number += 1
                self.logger.at_line(line_number)
                if not line.strip():
                    continue
                if line.startswith(self.header_prefixes):
                    if not self.header(line.rstrip("\r\n"), line_number, listener):
                        break
                    continue
                if not self.parse_line(line, line_number, listener):
                    self.logger.debug("stopped by listener")
                    break
        except Exception:
            self.state = ParserState.ERROR
            raise
        self.state = ParserState.END_OF_STREAM
        self.logger.debug("finished %s after %d lines", self.name, line_number)
        return line_number

    def header(self, line, line_number, listener):
        """Handle one header line.  Return False to stop reading records."""
        self.logger.debug("header line: %s", line)
        listener.header(line)
        return True

    def parse_line(self, line, line_number, listener):
        """Parse one record line.  Returns False if the listener stopped."""
        tokens = split_line(line, self.delimiter)
        self.state = ParserState.POSITIONAL
        self.check_tokens(tokens, line_number)
        listener.line_number(line_number)
        self.begin_record(tokens, line_number, listener)
        for column, token in zip(self.columns, tokens):
            value = column.read(token, line_number)
            if value is not None:
                getattr(listener, column.name)(value)
        self.state = ParserState.OPTIONAL
        self.parse_optional(tokens[len(self.columns):], line_number, listener)
        self.state = ParserState.COMPLETE
        keep_going = listener.complete()
        self.state = ParserState.AWAITING_LINE
        return keep_going is not False

    def check_tokens(self, tokens, line_number):
        """Raise FormatError if a line has the wrong number of tokens."""
        low = len(self.columns) if self.min_tokens is None else self.min_tokens
        if len(tokens) < low:
            raise FormatError(
                "invalid %s record, expected %d or more tokens, found %d" % (
                    self.name, low, len(tokens)),
                line_number)
        if self.max_tokens is not None and len(tokens) > self.max_tokens:
            raise FormatError(
                "invalid %s record, expected at most %d tokens, found %d" % (
                    self.name, self.max_tokens, len(tokens)),
                line_number)

    def begin_record(self, tokens, line_number, listener):
        """Hook called before the positional events of each record."""

    def parse_optional(self, tokens, line_number, listener):
        """Send a field or array_field event for each tag:type:value token."""
        for token in tokens:
            entry = parse_field(token, line_number, self.field_types)
            if entry.array_type is not None:
                listener.array_field(
                    entry.tag, entry.type, entry.array_type, entry.values)
            else:
                listener.field(entry.tag, entry.type, entry.values[0])

    @classmethod
    def events(cls):
        """Names of the column events this parser sends, in order."""
        return [column.name for column in cls.columns]


def parse(handle, parser, listener):
    """Run a parser over a text stream with a low-level ParseListener."""
    return parser.parse(handle, listener)

def stream(handle, parser, builder, listener):
    """Parse a text stream into records, passing each to a RecordListener."""
    return parser.parse(handle, BuilderAdapter(builder, listener))

def collect(handle, parser, builder):
    """Parse a whole text stream and return every record in a list.

    This holds the entire input in memory, so it isn't suitable for
    unbounded streams; use stream() with a RecordListener for those.
    """
    listener = Collect()
    stream(handle, parser, builder, listener)
    return listener.records

"""
Utility functions and exception classes used throughout the package.

These are largely just wrappers for configuration loading and the small bits
of text handling shared by every format.
"""

import re
import warnings
import yaml


class BioRecordsError(Exception):
    """Any sort of biorecords-related exception."""


class ValidationError(BioRecordsError, ValueError):
    """A record would violate one of its field invariants.

    The offending field name and value are kept as attributes so callers can
    report them without parsing the message.
    """

    def __init__(self, msg, field=None, value=None):
        super().__init__(msg)
        self.field = field
        self.value = value


class FormatError(BioRecordsError, ValueError):
    """Input text does not follow the expected grammar.

    line_number is the 1-based line in the original input, or None when the
    text did not come from a parsed stream.  tag and token name the optional
    field and raw text involved, where there is one.
    """

    def __init__(self, msg, line_number=None, tag=None, token=None):
        if line_number is not None:
            msg = "%s (line %d)" % (msg, line_number)
        super().__init__(msg)
        self.line_number = line_number
        self.tag = tag
        self.token = token


class MissingFieldError(BioRecordsError, LookupError):
    """A typed optional field accessor was called for an absent tag."""

    def __init__(self, msg, tag=None):
        super().__init__(msg)
        self.tag = tag


def check(condition, msg, field=None, value=None):
    """Raise ValidationError with the given message if condition is false."""
    if not condition:
        raise ValidationError(msg, field, value)


class TextFloat(float):
    """A float that remembers the text it was read from.

    It compares and hashes as the plain float, so "1.0" and "1" read into
    equal values, but format_number gives back the original text.
    """

    def __new__(cls, text):
        obj = super().__new__(cls, text)
        obj.text = text
        return obj

    def __repr__(self):
        return "TextFloat(%r)" % self.text


def format_number(value):
    """Render a float without a trailing ".0" for integral values.

    A TextFloat is written as the text it was read from.
    """
    text = getattr(value, "text", None)
    if text is not None:
        return text
    if float(value).is_integer() and abs(value) < 1e16:
        return str(int(value))
    return repr(value)


def split_line(line, delimiter="\t"):
    """Strip the line terminator from a line and split it into tokens."""
    return re.sub("[\r\n]+$", "", line).split(delimiter)


def yaml_load(path):
    """Load YAML from a file, assuming a dictionary if empty."""
    with open(path) as fin:
        with warnings.catch_warnings():
            warnings.filterwarnings("ignore", category=DeprecationWarning)
            data = yaml.safe_load(fin)
    # A file with nothing but comments loads as None, and everything
    # downstream expects a dict.
    data = data or {}
    return data

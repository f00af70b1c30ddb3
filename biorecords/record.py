"""
Base classes for immutable records and the builders that assemble them.

A Record holds a fixed set of positional attributes, named in order by the
subclass's POSITIONAL tuple, plus an OptionalFields multimap.  Records are
validated once at construction and can't be changed afterwards.  Two records
are equal when all positional attributes and optional fields are equal; the
line number they were read from is kept for diagnostics but is not part of
equality.

A Builder accumulates values without checking them and only validates (by
constructing the record) in build().  Every positional attribute gets a
with_<name> setter.  Builders are reused line after line by the streaming
parsers, with reset() in between.
"""

import functools
from .fields import (
    MISSING, OptionalField, OptionalFields,
    parse_character, parse_integer, parse_float, parse_string,
    parse_byte_array, parse_bytes, parse_integers, parse_floats)
from .util import MissingFieldError, check


def or_missing(value, missing=MISSING):
    """Text for a positional value, or the missing sentinel for None."""
    if value is None:
        return missing
    return str(value)


class Record:
    """Base class for an immutable record from one line of a file."""

    POSITIONAL = ()

    def __init__(self, line_number=-1, fields=None, **values):
        unknown = set(values) - set(self.POSITIONAL)
        if unknown:
            raise TypeError("unexpected fields for %s: %s" % (
                self.__class__.__name__, ", ".join(sorted(unknown))))
        if not isinstance(fields, OptionalFields):
            fields = OptionalFields(fields or ())
        object.__setattr__(self, "line_number", line_number)
        object.__setattr__(self, "fields", fields)
        for name in self.POSITIONAL:
            object.__setattr__(self, name, values.get(name))
        self.validate()
        object.__setattr__(self, "_hash", hash((self.__class__.__name__, self._key())))

    def validate(self):
        """Check field invariants, raising ValidationError on the first failure."""

    def to_line(self):
        """Render this record as one line of text, without a line terminator."""
        raise NotImplementedError

    def _key(self):
        return tuple(getattr(self, name) for name in self.POSITIONAL) + (self.fields,)

    def __setattr__(self, name, value):
        raise AttributeError("%s records are immutable" % self.__class__.__name__)

    def __delattr__(self, name):
        raise AttributeError("%s records are immutable" % self.__class__.__name__)

    def __eq__(self, other):
        if type(other) is not type(self):
            return NotImplemented
        return self._key() == other._key()

    def __hash__(self):
        return self._hash

    def __repr__(self):
        attrs = ["%s=%r" % (name, getattr(self, name)) for name in self.POSITIONAL]
        if self.fields:
            attrs.append("fields=%r" % (self.fields,))
        return "%s(%s)" % (self.__class__.__name__, ", ".join(attrs))

    def __str__(self):
        return self.to_line()

    # Validation helpers for subclasses.  Each names the offending field.

    def _check_range(self, name, low=None, high=None, optional=False):
        value = getattr(self, name)
        if value is None:
            check(optional, "%s must not be missing" % name, name, value)
            return
        if low is not None:
            check(value >= low,
                  "%s must be at least %s, was %s" % (name, low, value), name, value)
        if high is not None:
            check(value <= high,
                  "%s must be less than or equal to %s, was %s" % (name, high, value),
                  name, value)

    def _check_choice(self, name, choices, optional=False):
        value = getattr(self, name)
        if value is None and optional:
            return
        check(value in choices,
              "%s must be one of { %s }, was %r" % (
                  name, ", ".join("'%s'" % c for c in choices), value),
              name, value)

    def _check_span(self, start, end):
        self._check_range(start, 0)
        self._check_range(end, 0)
        check(getattr(self, end) >= getattr(self, start),
              "%s must be greater than or equal to %s, was %s < %s" % (
                  end, start, getattr(self, end), getattr(self, start)),
              end, getattr(self, end))

    def _check_present(self, name):
        check(getattr(self, name) is not None, "%s must not be missing" % name, name)


class TaggedRecord(Record):
    """A record whose optional fields follow the tag:type:value convention."""

    def contains_field(self, tag):
        """Is there at least one value for this tag?"""
        return tag in self.fields

    def get_field_character(self, tag):
        """Type=A value for a tag."""
        return parse_character(tag, self.fields)

    def get_field_integer(self, tag):
        """Type=i value for a tag."""
        return parse_integer(tag, self.fields)

    def get_field_float(self, tag):
        """Type=f value for a tag."""
        return parse_float(tag, self.fields)

    def get_field_string(self, tag):
        """Type=Z value for a tag."""
        return parse_string(tag, self.fields)

    def get_field_byte_array(self, tag):
        """Type=H value for a tag, as bytes."""
        return parse_byte_array(tag, self.fields)

    def get_field_bytes(self, tag):
        """Type=B (c or C) values for a tag."""
        return parse_bytes(tag, self.fields)

    def get_field_integers(self, tag):
        """Type=B integer values for a tag."""
        return parse_integers(tag, self.fields)

    def get_field_floats(self, tag):
        """Type=B float values for a tag."""
        return parse_floats(tag, self.fields)

    def _opt(self, getter, tag):
        try:
            return getter(tag)
        except MissingFieldError:
            return None

    def get_field_character_opt(self, tag):
        """Type=A value for a tag, or None if absent."""
        return self._opt(self.get_field_character, tag)

    def get_field_integer_opt(self, tag):
        """Type=i value for a tag, or None if absent."""
        return self._opt(self.get_field_integer, tag)

    def get_field_float_opt(self, tag):
        """Type=f value for a tag, or None if absent."""
        return self._opt(self.get_field_float, tag)

    def get_field_string_opt(self, tag):
        """Type=Z value for a tag, or None if absent."""
        return self._opt(self.get_field_string, tag)

    def get_field_byte_array_opt(self, tag):
        """Type=H value for a tag, or None if absent."""
        return self._opt(self.get_field_byte_array, tag)

    def get_field_bytes_opt(self, tag):
        """Type=B (c or C) values for a tag, or None if absent."""
        return self._opt(self.get_field_bytes, tag)

    def get_field_integers_opt(self, tag):
        """Type=B integer values for a tag, or None if absent."""
        return self._opt(self.get_field_integers, tag)

    def get_field_floats_opt(self, tag):
        """Type=B float values for a tag, or None if absent."""
        return self._opt(self.get_field_floats, tag)

    def _field_tokens(self):
        return [str(entry) for entry in self.fields.entries]


class Builder:
    """Mutable accumulator for the values of one record.

    Subclasses set record_class and DEFAULTS (the starting value of each
    positional attribute; anything unlisted starts as None).
    """

    record_class = None
    DEFAULTS = {}

    def __init__(self):
        self.reset()

    @classmethod
    def from_record(cls, record):
        """Make a builder pre-populated from an existing record."""
        builder = cls()
        builder.with_line_number(record.line_number)
        for name in cls.record_class.POSITIONAL:
            builder.values[name] = getattr(record, name)
        return builder.with_fields(record.fields)

    def __getattr__(self, name):
        # with_<name> setters for every positional attribute of the record
        if name.startswith("with_") and self.record_class is not None:
            key = name[len("with_"):]
            if key in self.record_class.POSITIONAL:
                return functools.partial(self._with_value, key)
        raise AttributeError("%r object has no attribute %r" % (
            self.__class__.__name__, name))

    def _with_value(self, name, value):
        self.values[name] = value
        return self

    def with_line_number(self, line_number):
        """Set the line number the record came from."""
        self.line_number = line_number
        return self

    def with_values(self, **values):
        """Set several positional values at once."""
        for name, value in values.items():
            if name not in self.record_class.POSITIONAL:
                raise TypeError("%s has no field %s" % (
                    self.record_class.__name__, name))
            self.values[name] = value
        return self

    def with_field(self, tag, type_code, value):
        """Append one scalar optional field."""
        self.entries.append(OptionalField(tag, type_code, None, (value,)))
        return self

    def with_array_field(self, tag, type_code, array_type, values):
        """Append one array optional field with its element type code."""
        self.entries.append(OptionalField(tag, type_code, array_type, tuple(values)))
        return self

    def with_fields(self, fields):
        """Append every entry from an OptionalFields (or iterable of entries)."""
        entries = fields.entries if isinstance(fields, OptionalFields) else fields
        for entry in entries:
            self.entries.append(OptionalField(*entry))
        return self

    def replace_field(self, tag, type_code, value):
        """Replace every value for a tag with a single scalar value.

        This copies the remaining entries, so it costs more than with_field.
        """
        return self.replace_array_field(tag, type_code, None, (value,))

    def replace_array_field(self, tag, type_code, array_type, values):
        """Replace every value for a tag with an array value."""
        self.entries = [entry for entry in self.entries if entry.tag != tag]
        self.entries.append(OptionalField(tag, type_code, array_type, tuple(values)))
        return self

    def replace_fields(self, fields):
        """Discard all optional fields and take these instead."""
        self.entries = []
        return self.with_fields(fields)

    def reset(self):
        """Return to the starting state, ready for another record."""
        self.line_number = -1
        self.values = dict(self.DEFAULTS)
        self.entries = []
        return self

    def build(self):
        """Construct (and validate) the record."""
        return self.record_class(
            line_number=self.line_number,
            fields=OptionalFields(self.entries),
            **self.values)

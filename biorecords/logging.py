"""
Logging helpers that add parsing context to log records.
"""

import logging


class ParseLoggerAdapter(logging.LoggerAdapter):
    """A logger adapter to automatically add parse context to log records.

    This uses LoggerAdapter's default implementation of the "process" method to
    use the "extra" argument in the logging calls, which in turn makes these
    extra key/value pairs show up as attributes of the log records.  The
    recognized keys are "format" (a format name, or a parser object with a name
    attribute), "source" (a stream or path, coerced to its name when it has
    one) and "line" (the current 1-based line number).
    """

    def __init__(self, logger, extra=None):
        if extra is None:
            extra = {}
        super().__init__(logger, extra)
        self._parse(extra)

    def _parse(self, extra):
        # for each recognized object type, coerce it to a text identifier.
        # Every key is always present so format strings can rely on them.
        self._parse_format(extra)
        self._parse_source(extra)
        extra.setdefault("line", None)

    @staticmethod
    def _parse_format(extra):
        obj = extra.get("format")
        if obj is not None:
            try:
                extra["format"] = str(obj.name)
            except AttributeError:
                extra["format"] = str(obj)
        else:
            extra["format"] = None

    @staticmethod
    def _parse_source(extra):
        obj = extra.get("source")
        if obj is not None:
            try:
                extra["source"] = str(obj.name)
            except AttributeError:
                extra["source"] = str(obj)
        else:
            extra["source"] = None

    def at_line(self, line_number):
        """Set the line number attached to subsequent messages."""
        self.extra["line"] = line_number

"""
Writing records back out as text.

Each record knows how to render itself as a line (Record.to_line); these
functions just add line terminators and handle headers.  Nothing here holds
any state, but writing to one shared handle from several threads needs
outside locking.
"""


def write_record(record, handle):
    """Write one record as a line of text."""
    handle.write(record.to_line())
    handle.write("\n")

def write_records(records, handle):
    """Write records as lines of text, returning how many were written."""
    count = 0
    for record in records:
        write_record(record, handle)
        count += 1
    return count

def write_lines(lines, handle):
    """Write header or other pre-formatted lines, adding line terminators."""
    for line in lines:
        handle.write(str(line).rstrip("\r\n"))
        handle.write("\n")

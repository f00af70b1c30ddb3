"""
Feature formats: GFF3 and BED.

Both are read into 0-based, half-open coordinates.  GFF3 text is 1-based and
closed, so its start column is shifted by one in each direction; BED text is
already 0-based.
"""

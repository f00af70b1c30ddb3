"""
Variant formats: VCF.

Positions are read into 0-based coordinates like every other format here, so
the VCF POS column is shifted down by one on reading and back up on writing.
"""

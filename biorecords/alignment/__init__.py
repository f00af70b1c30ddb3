"""
Alignment formats: GAF (graph alignments), PAF (pairwise alignments) and SAM.

All three carry a fixed set of tab-separated columns followed by optional
fields in the tag:type:value convention.
"""

"""
Assembly graph formats.  Only GFA 1 for now.
"""

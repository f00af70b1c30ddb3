"""Tests for biorecords.feature."""

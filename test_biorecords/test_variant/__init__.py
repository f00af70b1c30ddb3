"""Tests for biorecords.variant."""

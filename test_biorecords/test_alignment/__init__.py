"""Tests for biorecords.alignment."""

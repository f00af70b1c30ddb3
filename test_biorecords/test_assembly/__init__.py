"""Tests for biorecords.assembly."""

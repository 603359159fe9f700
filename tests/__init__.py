"""Test suite for queen-bee."""

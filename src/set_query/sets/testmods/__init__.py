"""Test helper set modules for loader unit tests."""

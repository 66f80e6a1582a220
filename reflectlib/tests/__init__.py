"""Reflectlib test suite."""

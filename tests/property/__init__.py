# tests/property/__init__.py
"""Property-based tests using Hypothesis."""

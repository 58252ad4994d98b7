"""Core infrastructure: canonical serialization, settings, logging."""

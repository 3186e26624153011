"""Core models, exceptions and logging."""

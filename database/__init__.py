"""Persistence: SQLAlchemy models/engine and key-value store adapters."""

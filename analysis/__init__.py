"""
Analysis tools for station climate records.

This package holds the analytical core: it consumes an already-parsed hourly
temperature series and emits structured tables and sequences. It never
downloads data and never draws anything.

Modules:
- climate: Calendar indexing, winter severity, record tracking, windowed KDE
"""

__all__ = []

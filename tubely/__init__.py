"""Video metadata server: SQLite storage, static and asset serving, media helpers."""

__version__ = "0.1.0"
"""Track books and audio books, progress, reviews and imported history in SQLite."""

__version__ = "0.1.0"
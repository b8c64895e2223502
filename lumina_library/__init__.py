"""Lumina Library - Core Application Package

This package contains:
- API endpoints and the single-page UI (api.py)
- Reading list state controller (library.py)
- CLI interface (main.py)
- Data model (book.py)
- Local key/value storage (database.py)
"""

__version__ = "1.0.0"

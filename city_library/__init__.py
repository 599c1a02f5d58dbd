"""City Library - Catalog Manager Package

This package contains the catalog manager modules including:
- Book and member records (book.py, member.py)
- Flat-file persistence (codec.py)
- Record store and library operations (library.py)
- CLI interface (main.py)
"""

__version__ = "1.0.0"

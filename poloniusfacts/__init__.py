"""Borrow-checker fact relations: interning, loading, program parsing, dumping and GraphViz rendering."""

__version__ = "0.1.0"
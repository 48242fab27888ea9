"""Concert Catalog: multi-source concert listing resolution."""

__version__ = "0.1.0"

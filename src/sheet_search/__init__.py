"""sheet-search: fuzzy full-text search across loaded spreadsheets."""

__version__ = "0.1.0"

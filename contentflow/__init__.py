"""ContentFlow: file-backed content store with spreadsheet activation."""

__version__ = "0.1.0"

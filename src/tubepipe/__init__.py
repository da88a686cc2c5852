"""Video metadata, stream and listing extraction."""

__version__ = "0.1.0"

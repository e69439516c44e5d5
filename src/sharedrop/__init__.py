"""sharedrop - share a directory over HTTP."""

__version__ = "0.1.0"

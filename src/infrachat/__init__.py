"""infrachat - terminal client for an infrastructure chat backend."""

__version__ = "0.1.0"

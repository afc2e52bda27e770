"""Data structures for clustering data streams, and the EDMStream algorithm."""

__version__ = "0.1.0"
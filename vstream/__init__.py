"""Byte-range video streaming over HTTP."""

__version__ = "0.1.0"

"""Fanfic video generator - turn a short narrative into a stitched video."""

__version__ = "0.1.0"

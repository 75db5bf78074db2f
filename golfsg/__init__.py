"""Strokes gained derivation from shot events and GPS tracks."""

__version__ = "0.1.0"

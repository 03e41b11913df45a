"""Amethyst - playback control core with background track enrichment."""

__version__ = "0.3.0"

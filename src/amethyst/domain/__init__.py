"""Domain layer: playback, enrichment, analysis and library."""

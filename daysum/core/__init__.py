"""Core components for timeline storage and summaries."""

"""Cross-platform duplicate detection for real-estate listings."""

__version__ = "0.1.0"

"""Version information for photo-index."""

__version__ = "0.3.0"

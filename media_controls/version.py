"""Version information for media-controls."""

__version__ = "0.1.0"

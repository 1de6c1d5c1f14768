"""Version information for the Pi Network SDK."""

__version__ = "0.1.0"

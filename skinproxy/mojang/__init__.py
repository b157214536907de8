"""skinproxy.mojang."""

__version__ = "0.1.0"

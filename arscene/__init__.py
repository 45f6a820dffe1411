"""AR Scene - resolves scanned codes and AR sessions into renderable scenes."""

__version__ = "0.3.0"

"""Command line interface for AR Scene."""

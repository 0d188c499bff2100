"""Command-line interface for apisurface."""

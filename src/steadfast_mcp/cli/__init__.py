"""Command-line interface for steadfast-mcp."""

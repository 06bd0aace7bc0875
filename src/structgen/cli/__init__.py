"""Command line interface for structgen."""

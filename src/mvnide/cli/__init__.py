"""Command line interface for mvnide."""

"""Unit tests for mvnide.core."""

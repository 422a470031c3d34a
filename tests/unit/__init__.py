"""Unit tests for individual to-do API modules."""

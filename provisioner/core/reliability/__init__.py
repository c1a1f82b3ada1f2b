"""Recovery strategies for fallible external operations."""

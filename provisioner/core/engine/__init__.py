"""Execution engine: unit runner and catalog synchronizer."""

"""Run configuration loading."""

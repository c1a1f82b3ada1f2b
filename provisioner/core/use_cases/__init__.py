"""Top-level flows: startup preflight and the interactive menu."""

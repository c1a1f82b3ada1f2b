"""Version-control client."""

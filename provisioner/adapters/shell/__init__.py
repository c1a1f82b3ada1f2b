"""Child-process execution."""

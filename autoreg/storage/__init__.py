"""Key-value persistence boundary."""

"""Activity catalog."""

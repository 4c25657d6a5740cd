"""Weekly session content."""

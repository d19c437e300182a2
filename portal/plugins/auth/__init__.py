"""Session credentials and user sign-in."""

"""Mini social network API."""

"""Terminal user interface for adsmith."""

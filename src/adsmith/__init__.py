"""adsmith: edit zone-placed ad blocks against an ads management API."""

__version__ = "0.1.0"

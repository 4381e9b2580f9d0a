"""Job relevance filtering, rejection learning, and form label mapping."""

__version__ = "0.1.0"

"""Query-result caching layer with generation-based invalidation."""

__version__ = "0.2.0"

"""Company News Aggregator: per-company news search with cross-company dedup."""

__version__ = "0.1.0"

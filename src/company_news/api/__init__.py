"""HTTP API for the Company News Aggregator."""

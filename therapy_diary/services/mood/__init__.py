"""Daily mood aggregation and reporting."""

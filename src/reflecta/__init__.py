"""reflecta - semantic aggregation for journal entries."""

__version__ = "0.1.0"

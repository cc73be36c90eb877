"""Core building blocks: results, error codes, configuration."""

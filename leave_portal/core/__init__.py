"""Core package - configuration, logging, HTTP client, admission and security."""

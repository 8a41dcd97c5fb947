"""Command-line interface for redisctl."""

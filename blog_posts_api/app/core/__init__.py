"""Shared infrastructure: configuration, logging, database and errors."""

"""Shared helpers: logging, schema validation and external checksum tools."""

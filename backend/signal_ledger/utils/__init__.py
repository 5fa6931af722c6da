"""Shared helpers: logging, time parsing and payload validation."""

"""Shared infrastructure: configuration, logging, errors, persistence and domain primitives."""

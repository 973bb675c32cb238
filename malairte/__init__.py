"""Primitives, key-value storage and JSON-RPC helpers for a Malairt blockchain node."""

__version__ = "0.1.0"
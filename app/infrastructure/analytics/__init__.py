"""Adapters for the analytics bounded context."""

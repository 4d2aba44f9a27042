"""Adapters for external systems: the remote snapshot store."""

"""Adapters for the REST surface, the push channel and user-facing notices."""

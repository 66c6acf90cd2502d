"""Persistence contracts and the SQLite implementation."""

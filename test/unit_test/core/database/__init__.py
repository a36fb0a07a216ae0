"""Unit tests for the database layer.

Repositories run against an in-memory SQLite database, so no external
database service is needed.
"""

"""User API: CRUD over users persisted to a JSON snapshot file."""

__version__ = "1.0.0"

"""Domain types and validation helpers."""

from .users import User, is_valid_email, normalize_name

__all__ = ["User", "is_valid_email", "normalize_name"]

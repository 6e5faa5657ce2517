"""
Core utilities shared across the User API.

This package hosts:
- configuration helpers (env vars, storage path, bind address)
- cross-cutting services such as logging setup, in-process metrics and the
  readers-writer lock used by the storage layer.

Routers/services should depend on core primitives instead of reading the
environment or configuring logging on their own.
"""

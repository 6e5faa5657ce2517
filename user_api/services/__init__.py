"""
High-level use cases for the User API.

Each service module orchestrates repositories/adapters to implement business
rules (generate ids, stamp times, keep created_at across updates).

Routers (FastAPI endpoints) should call these services instead of touching
the JSON store directly.
"""

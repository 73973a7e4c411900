"""
Service layer.

Each service encapsulates business logic for a domain and talks to the
SQLite database from ``core.db``.  Services take the caller's identity
as an explicit argument and raise the exceptions from ``core.errors``;
API handlers stay thin.
"""

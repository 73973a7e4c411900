"""
Application package initializer.

Each domain (authentication, meets) exposes a router defined in
``api/v1/endpoints`` and keeps its business logic in ``services``.
Versioning is handled by grouping routers under the ``api/<version>/``
hierarchy.
"""

from .main import app  # noqa: F401

"""
Pydantic schema definitions for API payloads.

Each domain (users, events) defines its own models for request and
response bodies.  All of them derive from ``ApiModel`` so the wire
format is camelCase while Python code keeps snake_case attribute names.
"""

from .base import ApiModel  # noqa: F401

"""Catalog domain exceptions.

Raised by the Service Layer; the API layer (Views) translates them into
HTTP responses.
"""

from __future__ import annotations


class ProductNotFound(Exception):
    """The requested product does not exist or has been soft-deleted."""

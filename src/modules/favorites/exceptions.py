from __future__ import annotations


class FavoriteNotFound(Exception):
    """The product is not in the user's favorites."""

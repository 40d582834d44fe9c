from __future__ import annotations


class InvalidTileError(ValueError):
    """Suit or rank outside the tile domain."""


class InvalidCountsError(ValueError):
    """Kind-count vector is malformed (wrong length or negative counts)."""

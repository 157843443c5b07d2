"""Errors raised for invalid pool-ev inputs."""

from __future__ import annotations


class PoolEVError(Exception):
    """Base error for invalid coupon, selection or filter input."""


class InvalidSelectionError(PoolEVError):
    """Raised when a selection set does not fit the match array."""


class DuplicateMatchError(PoolEVError):
    """Raised when the match array repeats an identifier."""


class PercentileBoundsError(PoolEVError, ValueError):
    """Raised for percent values outside [0, 100] or inverted bands."""


class CouponFormatError(PoolEVError):
    """Raised when a coupon document cannot be parsed."""

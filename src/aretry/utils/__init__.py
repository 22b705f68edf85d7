r"""Utility functions for retry policies.

This package provides helper functions for validating retry arguments
and for recording suppressed causes on the terminal failure of a retry
chain.
"""

from __future__ import annotations

__all__ = [
    "add_suppressed",
    "attach_suppressed",
    "get_suppressed",
    "validate_callable",
    "validate_count",
    "validate_factor",
    "validate_multiplier",
    "validate_not_none",
    "validate_randomness",
]

from aretry.utils.exceptions import add_suppressed, attach_suppressed, get_suppressed
from aretry.utils.validation import (
    validate_callable,
    validate_count,
    validate_factor,
    validate_multiplier,
    validate_not_none,
    validate_randomness,
)

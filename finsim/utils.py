"""General utilities for FinSim

Contents
--------
- Validation helpers
- Rate conversions (annual percent → simple monthly fraction)
- Frequency helpers (monthly-equivalent amounts)
- Rounding helpers for ledger boundaries
"""

from __future__ import annotations

from typing import Iterable

import numpy as np

from .constants import CENT_DIGITS, MONTHS_PER_YEAR

__all__ = [
    # Validation
    "check_non_negative",
    "check_finite",
    # Rates
    "monthly_rate",
    # Frequencies
    "monthly_equivalent",
    # Rounding / aggregation
    "round_cents",
    "total",
]

# ---------------------------------------------------------------------------
# Validation helpers
# ---------------------------------------------------------------------------

def check_non_negative(name: str, value: float) -> None:
    """Raise if *value* is negative (strict)."""
    if value < 0:
        raise ValueError(f"{name} must be non-negative (got {value}).")


def check_finite(name: str, value: float) -> None:
    """Raise if *value* is NaN or infinite."""
    if not np.isfinite(value):
        raise ValueError(f"{name} must be finite (got {value}).")


# ---------------------------------------------------------------------------
# Rate conversions (simple, not compounded)
# ---------------------------------------------------------------------------

def monthly_rate(annual_percent: float) -> float:
    """Convert an annual percentage (e.g. 4.5) to a monthly fraction.

    Uses the simple nominal split ``annual_percent / 12 / 100`` that loan
    servicing and investment growth both apply.
    """
    return annual_percent / MONTHS_PER_YEAR / 100.0


# ---------------------------------------------------------------------------
# Frequencies
# ---------------------------------------------------------------------------

def monthly_equivalent(amount: float, frequency: str) -> float:
    """Return the per-month share of an amount paid at *frequency*."""
    if frequency == "annual":
        return amount / MONTHS_PER_YEAR
    return amount


# ---------------------------------------------------------------------------
# Rounding / aggregation
# ---------------------------------------------------------------------------

def round_cents(value: float) -> float:
    """Round to cents. Only used where values leave the simulation."""
    return round(float(value), CENT_DIGITS)


def total(values: Iterable[float]) -> float:
    """Sum floats left to right, returning 0.0 for an empty iterable."""
    return sum(values, 0.0)

"""
Global constants for FinSim.

Purpose
-------
Centralizes default values and magic numbers used throughout the FinSim
codebase: horizon bounds, credit-score bounds and category thresholds,
and the loan-type keywords used when building simulation state.

Usage
-----
>>> from finsim.constants import MIN_SCORE, MAX_SCORE
>>> assert MIN_SCORE <= record.score <= MAX_SCORE

Categories
----------
- Time: months per year, horizon bounds
- Credit: score bounds, category thresholds
- Loans: secured-name keywords
- Rounding: ledger precision
"""

from typing import Dict, Tuple

__all__ = [
    # Time
    "MONTHS_PER_YEAR",
    "MIN_HORIZON",
    "MAX_HORIZON",
    "DEFAULT_HORIZON",
    # Credit
    "MIN_SCORE",
    "MAX_SCORE",
    "CATEGORY_THRESHOLDS",
    "LOWEST_CATEGORY",
    "DEFAULT_CREDIT_RULE",
    # Loans
    "SECURED_KEYWORDS",
    # Rounding
    "CENT_DIGITS",
]


# =============================================================================
# Time
# =============================================================================

MONTHS_PER_YEAR: int = 12
"""Number of months in a year (used for monthly-equivalent conversions)."""

MIN_HORIZON: int = 1
"""Shortest accepted simulation horizon in months."""

MAX_HORIZON: int = 360
"""Longest accepted simulation horizon in months (30 years)."""

DEFAULT_HORIZON: int = 12
"""Horizon used when a request does not specify one."""


# =============================================================================
# Credit score
# =============================================================================

MIN_SCORE: int = 300
"""Lower clamp for the credit score; also the base every score starts from."""

MAX_SCORE: int = 900
"""Upper clamp for the credit score."""

CATEGORY_THRESHOLDS: Tuple[Tuple[int, str], ...] = (
    (850, "Excellent"),
    (750, "Very Good"),
    (650, "Good"),
    (550, "Fair"),
)
"""Inclusive lower bounds for each score category, highest first."""

LOWEST_CATEGORY: str = "Poor"
"""Category for scores below every threshold."""

DEFAULT_CREDIT_RULE: Dict[str, object] = {
    "base": 300,
    "max": 850,
    "weights": {
        "payment_history": 0.4,
        "utilization": 0.25,
        "length": 0.1,
        "recent_changes": 0.1,
        "mix_and_stability": 0.15,
    },
    "penalties": {
        "missed_payment_last_12m": 40,
    },
}
"""Stored credit-rule defaults. Persisted and editable, not read by the score model."""


# =============================================================================
# Loans
# =============================================================================

SECURED_KEYWORDS: Tuple[str, ...] = ("home", "car")
"""Lower-case substrings that mark a loan as secured."""


# =============================================================================
# Rounding
# =============================================================================

CENT_DIGITS: int = 2
"""Decimal places kept when amounts are written to the ledgers."""

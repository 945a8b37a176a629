"""
Amortization calculator for FinSim.

Purpose
-------
Converts a loan's principal, annual percentage rate and term into the fixed
monthly payment that the simulation services every month. Loans store this
payment once, when they are created, and never recompute it.

Formula
-------
With monthly rate r = apr / 12 / 100 and term n:

    payment = P * r / (1 - (1 + r) ** -n)        (r > 0)
    payment = P / n                              (r == 0)

``monthly_payment`` does not validate its inputs. A zero term divides by zero;
callers (``LoanRecord``) enforce ``term_months >= 1``. The schedule rejects
negative or non-finite principals and rates.

Example
-------
>>> round(monthly_payment(25_000, 4.5, 60), 2)
466.08
>>> schedule = amortization_schedule(25_000, 4.5, 60)
>>> schedule.iloc[0][["interest", "principal", "balance"]].round(2).tolist()
[93.75, 372.33, 24627.67]
"""

from __future__ import annotations

import numpy as np
import pandas as pd

from .utils import check_finite, check_non_negative, monthly_rate

__all__ = [
    "monthly_payment",
    "amortization_schedule",
]


def monthly_payment(principal: float, annual_rate_percent: float, term_months: int) -> float:
    """
    Fixed monthly payment that amortizes *principal* over *term_months*.

    Parameters
    ----------
    principal : float
        Amount borrowed (>= 0).
    annual_rate_percent : float
        Annual percentage rate, e.g. 4.5 for 4.5%.
    term_months : int
        Number of monthly payments (>= 1).

    Returns
    -------
    float
        The level monthly payment.
    """
    if annual_rate_percent == 0:
        return principal / term_months
    r = monthly_rate(annual_rate_percent)
    return principal * r / (1.0 - (1.0 + r) ** -term_months)


def amortization_schedule(
    principal: float,
    annual_rate_percent: float,
    term_months: int,
    *,
    payment: float | None = None,
) -> pd.DataFrame:
    """
    Month-by-month payoff table for a fixed-payment loan.

    Uses the same servicing arithmetic as the month stepper: interest accrues
    on the outstanding balance, principal is ``min(payment - interest,
    balance)``, so the final row clears the balance exactly.

    Parameters
    ----------
    principal : float
        Amount borrowed.
    annual_rate_percent : float
        Annual percentage rate.
    term_months : int
        Number of months to tabulate.
    payment : float, optional
        Override the level payment (defaults to ``monthly_payment(...)``).

    Returns
    -------
    pd.DataFrame
        Columns ``month``, ``payment``, ``interest``, ``principal``,
        ``balance``; one row per month until the balance reaches zero or the
        term ends.
    """
    check_non_negative("principal", principal)
    check_finite("principal", principal)
    check_non_negative("annual_rate_percent", annual_rate_percent)
    check_finite("annual_rate_percent", annual_rate_percent)
    if payment is None:
        payment = monthly_payment(principal, annual_rate_percent, term_months)
    r = monthly_rate(annual_rate_percent)

    n = int(term_months)
    interest = np.zeros(n, dtype=float)
    principal_paid = np.zeros(n, dtype=float)
    balance = np.zeros(n, dtype=float)

    bal = float(principal)
    rows = 0
    for t in range(n):
        if bal <= 0:
            break
        i_t = bal * r
        p_t = min(payment - i_t, bal)
        bal -= p_t
        interest[t] = i_t
        principal_paid[t] = p_t
        balance[t] = bal
        rows += 1

    return pd.DataFrame(
        {
            "month": np.arange(rows, dtype=int),
            "payment": principal_paid[:rows] + interest[:rows],
            "interest": interest[:rows],
            "principal": principal_paid[:rows],
            "balance": balance[:rows],
        }
    )

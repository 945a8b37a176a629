"""
Credit score model for FinSim.

Purpose
-------
Scores the simulated state at each month boundary on a 300–900 scale and
explains the score through seven additive components.

Model
-----
The score starts at 300 and adds:

====================  =====  ===============================================
component             range  driven by
====================  =====  ===============================================
payment_history       0–350  missed payments (lifetime and trailing window),
                             average consecutive on-time months
utilization           0–150  current / original balance across loans
credit_age            5–100  months of simulated history
credit_mix            0–60   secured and unsecured loans present
debt_to_income        0–60   monthly loan payments / monthly income
recent_inquiries      0–30   new-credit inquiries
recovery              0–30   months since a default (inert, see below)
====================  =====  ===============================================

The total is rounded and clamped to [300, 900], then mapped to a category:
Excellent (≥850), Very Good (≥750), Good (≥650), Fair (≥550), Poor.

The constants are fixed here. The user's stored ``CreditRuleConfig`` is
carried on the state but not read. The recovery component only counts when
``state.has_default`` is set, which no action currently does.

Example
-------
>>> empty = SimulationState(credit_age=1)
>>> result = score_credit(0, empty)
>>> result.score, result.category
(395, 'Poor')
>>> result.breakdown.debt_to_income  # no income: ratio is 0
60
"""

from __future__ import annotations

from dataclasses import asdict, dataclass
from typing import Dict

from .constants import CATEGORY_THRESHOLDS, LOWEST_CATEGORY, MAX_SCORE, MIN_SCORE, MONTHS_PER_YEAR
from .state import SimulationState
from .utils import total

__all__ = [
    "CreditBreakdown",
    "CreditScore",
    "CreditScoreRecord",
    "score_credit",
    "credit_category",
    "payment_history_score",
    "utilization_score",
    "credit_age_score",
    "credit_mix_score",
    "debt_to_income_score",
    "inquiry_score",
    "recovery_score",
]


@dataclass(frozen=True)
class CreditBreakdown:
    payment_history: int = 0
    utilization: int = 0
    credit_age: int = 0
    credit_mix: int = 0
    debt_to_income: int = 0
    recent_inquiries: int = 0
    recovery: int = 0

    @property
    def total(self) -> int:
        return sum(asdict(self).values())

    def to_dict(self, *, camel: bool = False) -> Dict[str, int]:
        data = asdict(self)
        if camel:
            return {_camel(k): v for k, v in data.items()}
        return data


@dataclass(frozen=True)
class CreditScore:
    score: int
    category: str
    breakdown: CreditBreakdown


@dataclass(frozen=True)
class CreditScoreRecord:
    """Score for one simulated month."""
    month: int
    score: int
    category: str
    breakdown: CreditBreakdown


def _camel(name: str) -> str:
    head, *rest = name.split("_")
    return head + "".join(p.capitalize() for p in rest)


# ---------------------------------------------------------------------------
# Components
# ---------------------------------------------------------------------------

def payment_history_score(month: int, state: SimulationState) -> int:
    """Payment history, 0–350. Zero when the user has no loans."""
    if not state.loans:
        return 0

    total_on_time = sum(l.consecutive_on_time for l in state.loans)
    total_missed = sum(l.missed_payments for l in state.loans)

    if total_missed == 0 and total_on_time > 0:
        score = 200
    elif total_missed == 0:
        score = 150
    else:
        # Window spans month-12 through month inclusive.
        recent = sum(1 for mp in state.missed_log if month - 12 <= mp.month <= month)
        score = max(0, 200 - recent * 40 - total_missed * 20)

    avg_consecutive = total_on_time / len(state.loans)
    if avg_consecutive >= 24:
        score += 50
    elif avg_consecutive >= 12:
        score += 30
    elif avg_consecutive >= 6:
        score += 15

    return min(350, score)


def utilization_score(state: SimulationState) -> int:
    """Balance utilization, 0–150. Zero when the user has no loans."""
    if not state.loans:
        return 0
    total_original = total(l.original_amount for l in state.loans)
    total_current = total(l.balance for l in state.loans)
    utilization = total_current / total_original * 100 if total_original > 0 else 0.0

    if utilization < 30:
        return 150
    if utilization < 50:
        return 100
    if utilization < 75:
        return 50
    if utilization < 90:
        return 20
    return 0


def credit_age_score(credit_age: int) -> int:
    """Length of history, 5–100."""
    years = credit_age / MONTHS_PER_YEAR
    if years >= 7:
        return 100
    if years >= 5:
        return 85
    if years >= 3:
        return 70
    if years >= 2:
        return 50
    if years >= 1:
        return 30
    if years >= 0.5:
        return 15
    return 5


def credit_mix_score(state: SimulationState) -> int:
    """Secured/unsecured mix, 0–60."""
    has_secured = any(l.loan_type == "secured" for l in state.loans)
    has_unsecured = any(l.loan_type == "unsecured" for l in state.loans)
    if has_secured and has_unsecured:
        return 60
    if has_secured:
        return 40
    if has_unsecured:
        return 20
    return 0


def debt_to_income_score(state: SimulationState) -> int:
    """Debt-to-income, 0–60.

    Payments are the loans' fixed ``monthly_payment`` whether or not the loan
    is currently being serviced. With no income the ratio is 0.
    """
    monthly_income = total(i.monthly_amount for i in state.incomes)
    monthly_debt = total(l.monthly_payment for l in state.loans)
    dti = monthly_debt / monthly_income * 100 if monthly_income > 0 else 0.0

    if dti < 35:
        return 60
    if dti < 50:
        return 40
    if dti < 70:
        return 15
    return 0


def inquiry_score(recent_inquiries: int) -> int:
    """New credit, 0–30: ten points off per inquiry."""
    return max(0, 30 - recent_inquiries * 10)


def recovery_score(state: SimulationState) -> int:
    """Recovery after a default, 0–30. Zero unless ``has_default``."""
    if not state.has_default:
        return 0
    months = state.months_since_default
    if months >= 24:
        return 30
    if months >= 18:
        return 20
    if months >= 12:
        return 10
    return 0


# ---------------------------------------------------------------------------
# Score
# ---------------------------------------------------------------------------

def credit_category(score: int) -> str:
    """Map a score to its category; thresholds are inclusive."""
    for threshold, name in CATEGORY_THRESHOLDS:
        if score >= threshold:
            return name
    return LOWEST_CATEGORY


def score_credit(month: int, state: SimulationState) -> CreditScore:
    """
    Score ``state`` as of the end of ``month``.

    Parameters
    ----------
    month : int
        The month just simulated (0-indexed). Anchors the trailing
        missed-payment window.
    state : SimulationState
        State after the month's actions, cash flows and credit-age update.
        Not modified.

    Returns
    -------
    CreditScore
        Clamped score, category and the seven-part breakdown.
    """
    breakdown = CreditBreakdown(
        payment_history=payment_history_score(month, state),
        utilization=utilization_score(state),
        credit_age=credit_age_score(state.credit_age),
        credit_mix=credit_mix_score(state),
        debt_to_income=debt_to_income_score(state),
        recent_inquiries=inquiry_score(state.recent_inquiries),
        recovery=recovery_score(state),
    )
    score = max(MIN_SCORE, min(MAX_SCORE, int(round(MIN_SCORE + breakdown.total))))
    return CreditScore(score=score, category=credit_category(score), breakdown=breakdown)

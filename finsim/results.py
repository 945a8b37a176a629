"""
Results assembly for FinSim.

Purpose
-------
Packages the two parallel sequences a run produces (month records and
credit scores) into a ``SimulationResult``, and prepares the ``WriteBack``
payload the persistence layer stores.

Key components
--------------
- SimulationResult:
    Timeline, credit history and the terminal net worth / score. Offers
    pandas views (``to_dataframe``, ``credit_frame``) and a JSON-ready
    ``to_dict`` using camelCase keys.

- assemble_results:
    Extracts terminal values; no other computation. An empty run reports a
    net worth of 0 and the minimum score.

- WriteBack / build_write_back:
    Final balances per loan and investment, the loan-payment ledger, the
    transaction ledger (flagged as simulation output), the credit-history
    ledger and the profile summary. Amounts are rounded to cents here, at
    the storage boundary, and nowhere earlier.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, List, Sequence, Tuple

import pandas as pd

from .config import (
    CreditHistoryRecord,
    LoanPaymentRecord,
    ProfileSummary,
    TransactionRecord,
)
from .constants import MIN_SCORE
from .credit import CreditScoreRecord
from .state import SimulationState
from .stepper import MonthRecord
from .utils import round_cents

__all__ = [
    "SimulationResult",
    "WriteBack",
    "assemble_results",
    "build_write_back",
]

_TIMELINE_COLUMNS = [
    "month",
    "income",
    "expenses",
    "loan_payments",
    "investment_gains",
    "investment_contributions",
    "cashflow",
    "net_worth",
    "total_debt",
    "total_assets",
    "credit_score",
    "credit_category",
]


@dataclass(frozen=True)
class SimulationResult:
    timeline: Tuple[MonthRecord, ...]
    credit_history: Tuple[CreditScoreRecord, ...]
    final_net_worth: float
    final_credit_score: int

    @property
    def months(self) -> int:
        return len(self.timeline)

    def to_dataframe(self) -> pd.DataFrame:
        """Timeline as a DataFrame indexed by month (transactions omitted)."""
        rows = [{col: getattr(r, col) for col in _TIMELINE_COLUMNS} for r in self.timeline]
        return pd.DataFrame(rows, columns=_TIMELINE_COLUMNS).set_index("month")

    def credit_frame(self) -> pd.DataFrame:
        """Credit history as a DataFrame: score, category and one column per component."""
        rows = []
        for c in self.credit_history:
            row: Dict[str, Any] = {"month": c.month, "score": c.score, "category": c.category}
            row.update(c.breakdown.to_dict())
            rows.append(row)
        frame = pd.DataFrame(rows)
        if frame.empty:
            return frame
        return frame.set_index("month")

    def to_dict(self) -> Dict[str, Any]:
        """JSON-ready representation with camelCase keys."""
        return {
            "timeline": [_month_to_dict(r) for r in self.timeline],
            "creditHistory": [
                {
                    "month": c.month,
                    "score": c.score,
                    "category": c.category,
                    "breakdown": c.breakdown.to_dict(camel=True),
                }
                for c in self.credit_history
            ],
            "finalNetWorth": self.final_net_worth,
            "finalCreditScore": self.final_credit_score,
        }


def _month_to_dict(record: MonthRecord) -> Dict[str, Any]:
    transactions = []
    for t in record.transactions:
        item: Dict[str, Any] = {
            "type": t.type,
            "description": t.description,
            "amount": t.amount,
            "relatedId": t.related_id,
        }
        if t.category is not None:
            item["category"] = t.category
        transactions.append(item)
    return {
        "month": record.month,
        "income": record.income,
        "expenses": record.expenses,
        "loanPayments": record.loan_payments,
        "investmentGains": record.investment_gains,
        "investmentContributions": record.investment_contributions,
        "cashflow": record.cashflow,
        "netWorth": record.net_worth,
        "totalDebt": record.total_debt,
        "totalAssets": record.total_assets,
        "creditScore": record.credit_score,
        "creditCategory": record.credit_category,
        "transactions": transactions,
    }


def assemble_results(
    timeline: Sequence[MonthRecord],
    credit_history: Sequence[CreditScoreRecord],
) -> SimulationResult:
    """Wrap the run's sequences and pull out the terminal values."""
    final_net_worth = timeline[-1].net_worth if timeline else 0.0
    final_score = credit_history[-1].score if credit_history else MIN_SCORE
    return SimulationResult(
        timeline=tuple(timeline),
        credit_history=tuple(credit_history),
        final_net_worth=final_net_worth,
        final_credit_score=final_score,
    )


# ---------------------------------------------------------------------------
# Write-back
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class WriteBack:
    """Everything a run asks the store to persist for one user."""

    user_id: str
    loan_balances: Dict[int, float] = field(default_factory=dict)
    investment_balances: Dict[int, float] = field(default_factory=dict)
    loan_payments: List[LoanPaymentRecord] = field(default_factory=list)
    transactions: List[TransactionRecord] = field(default_factory=list)
    credit_history: List[CreditHistoryRecord] = field(default_factory=list)
    summary: ProfileSummary = field(default_factory=ProfileSummary)


def build_write_back(user_id: str, state: SimulationState, result: SimulationResult) -> WriteBack:
    """
    Build the persistence payload from a finished run.

    Parameters
    ----------
    user_id : str
        Owner of the records.
    state : SimulationState
        The run's final state (balances and the loan-payment ledger).
    result : SimulationResult
        The assembled result.
    """
    loan_payments = [
        LoanPaymentRecord(
            loan_id=p.loan_id,
            month=p.month,
            payment_amount=round_cents(p.payment_amount),
            principal_paid=round_cents(p.principal_paid),
            interest_paid=round_cents(p.interest_paid),
            remaining_balance=round_cents(p.remaining_balance),
            was_missed=p.was_missed,
        )
        for p in state.payment_log
    ]
    transactions = [
        TransactionRecord(
            month=record.month,
            type=t.type,
            category=t.category,
            description=t.description,
            amount=round_cents(t.amount),
            related_id=t.related_id,
            is_simulation=True,
        )
        for record in result.timeline
        for t in record.transactions
    ]
    credit_history = [
        CreditHistoryRecord(month=c.month, score=c.score, breakdown=c.breakdown.to_dict(camel=True))
        for c in result.credit_history
    ]
    return WriteBack(
        user_id=user_id,
        loan_balances={l.id: round_cents(l.balance) for l in state.loans},
        investment_balances={i.id: round_cents(i.balance) for i in state.investments},
        loan_payments=loan_payments,
        transactions=transactions,
        credit_history=credit_history,
        summary=ProfileSummary(
            current_net_worth=round_cents(result.final_net_worth),
            current_credit_score=result.final_credit_score,
            months_simulated=result.months,
        ),
    )

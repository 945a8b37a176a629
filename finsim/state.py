"""
Simulation state and loader for FinSim.

Purpose
-------
Holds the mutable, run-scoped view of a user's finances that the month
stepper advances, and builds it from persisted records.

Key components
--------------
- LoanState, InvestmentState, IncomeStream, ExpenseStream:
    Mutable per-entity state. Loans carry payment counters and an inferred
    secured/unsecured type; investments carry their current contribution.

- SimulationState:
    The aggregate owned by exactly one run. Besides the entity lists it
    carries the run-level credit inputs: credit age, the append-only log of
    missed payments, the loan-payment ledger, inquiry count and the default
    tracking fields.

- load_state:
    Pure transformation from a ``FinancialProfile`` to a fresh
    ``SimulationState``. Inactive records are dropped.

Notes
-----
``has_default`` and ``months_since_default`` are tracked for the recovery
component of the credit score, but no action sets ``has_default``; the
recovery path stays inert until something does.

Example
-------
>>> from finsim.config import FinancialProfile, LoanRecord
>>> profile = FinancialProfile(loans=[LoanRecord.create(
...     id=1, name="Car Loan", original_amount=25_000, apr=4.5, term_months=60)])
>>> state = load_state(profile)
>>> state.loans[0].loan_type
'secured'
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import List, Literal, Optional

from .config import (
    CreditRuleConfig,
    ExpenseRecord,
    FinancialProfile,
    IncomeRecord,
    InvestmentRecord,
    LoanRecord,
)
from .constants import SECURED_KEYWORDS
from .exceptions import DataUnavailableError
from .utils import monthly_equivalent

__all__ = [
    "LoanState",
    "InvestmentState",
    "IncomeStream",
    "ExpenseStream",
    "MissedPayment",
    "LoanPaymentEntry",
    "SimulationState",
    "infer_loan_type",
    "load_state",
]

LoanType = Literal["secured", "unsecured"]


def infer_loan_type(name: str) -> LoanType:
    """Classify a loan as secured when its name mentions home or car.

    Plain substring match on the lower-cased name, so "Credit Card Debt"
    counts as secured too.
    """
    lowered = name.lower()
    if any(keyword in lowered for keyword in SECURED_KEYWORDS):
        return "secured"
    return "unsecured"


# ---------------------------------------------------------------------------
# Entity state
# ---------------------------------------------------------------------------

@dataclass
class LoanState:
    id: int
    name: str
    balance: float
    original_amount: float
    apr: float
    term_months: int
    monthly_payment: float
    start_month: int = 0
    months_paid: int = 0
    consecutive_on_time: int = 0
    total_payments: int = 0
    missed_payments: int = 0
    loan_type: LoanType = "unsecured"

    def is_serviced(self, month: int) -> bool:
        """True when the loan has started and still has a balance."""
        return month >= self.start_month and self.balance > 0


@dataclass
class InvestmentState:
    id: int
    name: str
    balance: float
    monthly_contribution: float
    annual_return: float


@dataclass
class IncomeStream:
    id: int
    name: str
    amount: float
    frequency: str = "monthly"

    @property
    def monthly_amount(self) -> float:
        return monthly_equivalent(self.amount, self.frequency)


@dataclass
class ExpenseStream:
    id: int
    name: str
    amount: float
    category: str = "Other"
    frequency: str = "monthly"

    @property
    def monthly_amount(self) -> float:
        return monthly_equivalent(self.amount, self.frequency)


# ---------------------------------------------------------------------------
# Logs
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class MissedPayment:
    loan_id: int
    month: int


@dataclass(frozen=True)
class LoanPaymentEntry:
    """One row of the loan-payment ledger (missed payments included)."""
    loan_id: int
    month: int
    payment_amount: float
    principal_paid: float
    interest_paid: float
    remaining_balance: float
    was_missed: bool = False


# ---------------------------------------------------------------------------
# Aggregate
# ---------------------------------------------------------------------------

@dataclass
class SimulationState:
    """
    Mutable financial state for a single simulation run.

    A state instance belongs to one run. Build a new one with
    ``load_state`` for every run; never share one between runs.
    """

    loans: List[LoanState] = field(default_factory=list)
    investments: List[InvestmentState] = field(default_factory=list)
    incomes: List[IncomeStream] = field(default_factory=list)
    expenses: List[ExpenseStream] = field(default_factory=list)
    credit_rule: CreditRuleConfig = field(default_factory=CreditRuleConfig)
    credit_age: int = 0
    missed_log: List[MissedPayment] = field(default_factory=list)
    payment_log: List[LoanPaymentEntry] = field(default_factory=list)
    has_default: bool = False
    months_since_default: int = 0
    recent_inquiries: int = 0

    # -------------------- Lookups --------------------
    def find_loan(self, loan_id: int) -> Optional[LoanState]:
        return next((l for l in self.loans if l.id == loan_id), None)

    def find_income(self, income_id: int) -> Optional[IncomeStream]:
        return next((i for i in self.incomes if i.id == income_id), None)

    def find_expense(self, expense_id: int) -> Optional[ExpenseStream]:
        return next((e for e in self.expenses if e.id == expense_id), None)

    def find_investment(self, investment_id: int) -> Optional[InvestmentState]:
        return next((i for i in self.investments if i.id == investment_id), None)

    def is_missed(self, loan_id: int, month: int) -> bool:
        """True when a missed payment is logged for this loan and month."""
        return MissedPayment(loan_id, month) in self.missed_log


# ---------------------------------------------------------------------------
# Loader
# ---------------------------------------------------------------------------

def _loan_state(record: LoanRecord) -> LoanState:
    return LoanState(
        id=record.id,
        name=record.name,
        balance=float(record.current_balance),
        original_amount=float(record.original_amount),
        apr=float(record.apr),
        term_months=int(record.term_months),
        monthly_payment=float(record.monthly_payment),
        start_month=int(record.start_month or 0),
        loan_type=infer_loan_type(record.name),
    )


def _investment_state(record: InvestmentRecord) -> InvestmentState:
    return InvestmentState(
        id=record.id,
        name=record.name,
        balance=float(record.current_balance),
        monthly_contribution=float(record.monthly_contribution or 0.0),
        annual_return=float(record.annual_return_rate),
    )


def _income_stream(record: IncomeRecord) -> IncomeStream:
    return IncomeStream(
        id=record.id,
        name=record.name,
        amount=float(record.amount),
        frequency=record.frequency,
    )


def _expense_stream(record: ExpenseRecord) -> ExpenseStream:
    return ExpenseStream(
        id=record.id,
        name=record.name,
        amount=float(record.amount),
        category=record.category,
        frequency=record.frequency,
    )


def load_state(profile: Optional[FinancialProfile]) -> SimulationState:
    """
    Build a fresh simulation state from a user's persisted records.

    Parameters
    ----------
    profile : FinancialProfile
        The user's records. Only ``is_active`` records are simulated.

    Returns
    -------
    SimulationState
        A newly allocated state; counters and logs start empty.

    Raises
    ------
    DataUnavailableError
        If ``profile`` is None.
    """
    if profile is None:
        raise DataUnavailableError("No financial profile available to simulate.")

    return SimulationState(
        loans=[_loan_state(r) for r in profile.loans if r.is_active],
        investments=[_investment_state(r) for r in profile.investments if r.is_active],
        incomes=[_income_stream(r) for r in profile.incomes if r.is_active],
        expenses=[_expense_stream(r) for r in profile.expenses if r.is_active],
        credit_rule=profile.credit_rule,
    )

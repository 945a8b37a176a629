"""
Month stepper for FinSim.

Purpose
-------
Advances a ``SimulationState`` by one month and emits the month's immutable
record together with its credit score.

Order of operations
-------------------
Each month runs the same fixed sequence; reproducibility depends on it.

1. Apply the month's actions.
2. Accrue income (monthly-equivalent amount per stream).
3. Accrue expenses.
4. Service loans that have started and still carry a balance. A logged
   missed payment bumps the loan's missed counter, resets its on-time
   streak and writes a zero ledger row; otherwise interest accrues on the
   balance and ``min(payment - interest, balance)`` goes to principal.
5. Grow investments: add the contribution, then apply one month of return.
   Only positive gains produce a transaction.
6. Aggregate totals. Cash flow is ``income - expenses - loan payments +
   investment gains``; contributions are transfers and are not subtracted.
7. Advance credit age (and months since default, when defaulted).
8. Score the resulting state.

Nothing here raises for inconsistent data: unknown ids in actions are
no-ops.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import List, Optional, Sequence, Tuple

from .actions import Action, apply_actions
from .credit import CreditScoreRecord, score_credit
from .state import LoanPaymentEntry, SimulationState
from .utils import monthly_rate, total

__all__ = [
    "Transaction",
    "MonthRecord",
    "step_month",
]


@dataclass(frozen=True)
class Transaction:
    """One cash-flow line within a month."""
    type: str
    description: str
    amount: float
    related_id: Optional[int] = None
    category: Optional[str] = None


@dataclass(frozen=True)
class MonthRecord:
    """
    Immutable snapshot of one simulated month.

    Attributes
    ----------
    month : int
        0-indexed month.
    income, expenses, loan_payments : float
        Monthly flows.
    investment_gains, investment_contributions : float
        Investment growth (including non-positive gains) and contributions.
    cashflow : float
        income - expenses - loan_payments + investment_gains.
    net_worth : float
        total_assets - total_debt.
    total_debt, total_assets : float
        Sum of loan balances and investment balances at month end.
    credit_score : int
    credit_category : str
    transactions : tuple of Transaction
        Lines in emission order: income, expenses, loan payments, investments.
    """

    month: int
    income: float
    expenses: float
    loan_payments: float
    investment_gains: float
    investment_contributions: float
    cashflow: float
    net_worth: float
    total_debt: float
    total_assets: float
    credit_score: int
    credit_category: str
    transactions: Tuple[Transaction, ...] = ()


@dataclass
class _MonthTotals:
    income: float = 0.0
    expenses: float = 0.0
    loan_payments: float = 0.0
    investment_gains: float = 0.0
    investment_contributions: float = 0.0
    transactions: List[Transaction] = field(default_factory=list)


# ---------------------------------------------------------------------------
# Steps
# ---------------------------------------------------------------------------

def _accrue_income(state: SimulationState, acc: _MonthTotals) -> None:
    for income in state.incomes:
        amount = income.monthly_amount
        acc.income += amount
        acc.transactions.append(
            Transaction(type="income", description=income.name, amount=amount, related_id=income.id)
        )


def _accrue_expenses(state: SimulationState, acc: _MonthTotals) -> None:
    for expense in state.expenses:
        amount = expense.monthly_amount
        acc.expenses += amount
        acc.transactions.append(
            Transaction(
                type="expense",
                description=expense.name,
                amount=amount,
                related_id=expense.id,
                category=expense.category,
            )
        )


def _service_loans(month: int, state: SimulationState, acc: _MonthTotals) -> None:
    for loan in state.loans:
        if not loan.is_serviced(month):
            continue

        if state.is_missed(loan.id, month):
            loan.missed_payments += 1
            loan.consecutive_on_time = 0
            state.payment_log.append(
                LoanPaymentEntry(
                    loan_id=loan.id,
                    month=month,
                    payment_amount=0.0,
                    principal_paid=0.0,
                    interest_paid=0.0,
                    remaining_balance=loan.balance,
                    was_missed=True,
                )
            )
            continue

        interest = loan.balance * monthly_rate(loan.apr)
        principal = min(loan.monthly_payment - interest, loan.balance)
        payment = principal + interest

        loan.balance -= principal
        loan.months_paid += 1
        loan.total_payments += 1
        loan.consecutive_on_time += 1

        acc.loan_payments += payment
        acc.transactions.append(
            Transaction(
                type="loan_payment",
                description=f"{loan.name} payment",
                amount=payment,
                related_id=loan.id,
            )
        )
        state.payment_log.append(
            LoanPaymentEntry(
                loan_id=loan.id,
                month=month,
                payment_amount=payment,
                principal_paid=principal,
                interest_paid=interest,
                remaining_balance=loan.balance,
                was_missed=False,
            )
        )


def _grow_investments(state: SimulationState, acc: _MonthTotals) -> None:
    for investment in state.investments:
        if investment.monthly_contribution > 0:
            investment.balance += investment.monthly_contribution
            acc.investment_contributions += investment.monthly_contribution
            acc.transactions.append(
                Transaction(
                    type="investment_contribution",
                    description=f"{investment.name} contribution",
                    amount=investment.monthly_contribution,
                    related_id=investment.id,
                )
            )

        gain = investment.balance * monthly_rate(investment.annual_return)
        investment.balance += gain
        acc.investment_gains += gain
        if gain > 0:
            acc.transactions.append(
                Transaction(
                    type="investment_gain",
                    description=f"{investment.name} returns",
                    amount=gain,
                    related_id=investment.id,
                )
            )


# ---------------------------------------------------------------------------
# Public API
# ---------------------------------------------------------------------------

def step_month(
    month: int,
    state: SimulationState,
    actions: Sequence[Action] = (),
) -> Tuple[MonthRecord, CreditScoreRecord]:
    """
    Simulate ``month`` on ``state`` in place.

    Parameters
    ----------
    month : int
        0-indexed month being simulated. Months must be stepped in order.
    state : SimulationState
        Run state; mutated.
    actions : sequence of Action
        Actions scheduled for this month, in application order.

    Returns
    -------
    (MonthRecord, CreditScoreRecord)
        The month's snapshot and its credit score.
    """
    apply_actions(state, month, actions)

    acc = _MonthTotals()
    _accrue_income(state, acc)
    _accrue_expenses(state, acc)
    _service_loans(month, state, acc)
    _grow_investments(state, acc)

    total_debt = total(l.balance for l in state.loans)
    total_assets = total(i.balance for i in state.investments)
    cashflow = acc.income - acc.expenses - acc.loan_payments + acc.investment_gains

    state.credit_age += 1
    if state.has_default:
        state.months_since_default += 1

    credit = score_credit(month, state)

    record = MonthRecord(
        month=month,
        income=acc.income,
        expenses=acc.expenses,
        loan_payments=acc.loan_payments,
        investment_gains=acc.investment_gains,
        investment_contributions=acc.investment_contributions,
        cashflow=cashflow,
        net_worth=total_assets - total_debt,
        total_debt=total_debt,
        total_assets=total_assets,
        credit_score=credit.score,
        credit_category=credit.category,
        transactions=tuple(acc.transactions),
    )
    score_record = CreditScoreRecord(
        month=month,
        score=credit.score,
        category=credit.category,
        breakdown=credit.breakdown,
    )
    return record, score_record

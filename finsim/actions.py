"""
User actions and the action scheduler for FinSim.

Purpose
-------
Models the discrete, month-scheduled interventions a user can apply to a
simulation ("what if I miss this payment", "what if my salary changes") and
indexes them by the month they take effect.

Key components
--------------
- Action variants:
    One frozen Pydantic model per action kind, discriminated on ``type``:

    ==================  =========================================
    type                payload
    ==================  =========================================
    missed_payment      loan_id
    income_change       income_id, new_amount
    expense_change      expense_id, new_amount
    lump_sum            loan_id, amount
    investment_change   investment_id, monthly_contribution (opt.)
    new_loan            (none; records a credit inquiry only)
    ==================  =========================================

    Each variant knows how to apply itself to a ``SimulationState``. Unknown
    entity ids are ignored, never raised.

- parse_actions:
    Validates raw dictionaries (snake_case or camelCase keys) into the tagged
    union. Malformed payloads raise ``finsim.exceptions.ValidationError``.

- index_actions:
    Stable month → actions grouping. Same-month actions keep their input
    order.

- apply_actions:
    Applies one month's actions, in order, to the state.

Example
-------
>>> actions = parse_actions([
...     {"type": "missed_payment", "month": 3, "loanId": 1},
...     {"type": "lump_sum", "month": 6, "loan_id": 1, "amount": 2_000},
... ])
>>> sorted(index_actions(actions))
[3, 6]
"""

from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from typing import Annotated, Dict, Iterable, List, Literal, Mapping, Optional, Sequence, Union

from pydantic import BaseModel, ConfigDict, Field, TypeAdapter
from pydantic import ValidationError as PydanticValidationError
from pydantic.alias_generators import to_camel

from .exceptions import ValidationError
from .state import MissedPayment, SimulationState

__all__ = [
    "MissedPaymentAction",
    "IncomeChangeAction",
    "ExpenseChangeAction",
    "LumpSumAction",
    "InvestmentChangeAction",
    "NewLoanAction",
    "Action",
    "parse_actions",
    "index_actions",
    "apply_actions",
]

logger = logging.getLogger(__name__)


class _ActionBase(BaseModel, ABC):
    # Leftover keys from other action forms are dropped, not rejected.
    model_config = ConfigDict(
        frozen=True,
        extra="ignore",
        alias_generator=to_camel,
        populate_by_name=True,
    )

    month: int = Field(ge=0, description="Simulation month the action takes effect")

    @abstractmethod
    def apply(self, state: SimulationState, month: int) -> None:
        """Apply the action to ``state`` for ``month``, in place."""


class MissedPaymentAction(_ActionBase):
    """Skip the payment on ``loan_id`` this month.

    Only logged here; the stepper skips the payment when it services loans.
    """

    type: Literal["missed_payment"] = "missed_payment"
    loan_id: int

    def apply(self, state: SimulationState, month: int) -> None:
        state.missed_log.append(MissedPayment(loan_id=self.loan_id, month=month))


class IncomeChangeAction(_ActionBase):
    """Permanently set an income stream's amount."""

    type: Literal["income_change"] = "income_change"
    income_id: int
    new_amount: float

    def apply(self, state: SimulationState, month: int) -> None:
        income = state.find_income(self.income_id)
        if income is None:
            logger.debug("income_change at month %d: unknown income %s", month, self.income_id)
            return
        income.amount = self.new_amount


class ExpenseChangeAction(_ActionBase):
    """Permanently set an expense's amount."""

    type: Literal["expense_change"] = "expense_change"
    expense_id: int
    new_amount: float

    def apply(self, state: SimulationState, month: int) -> None:
        expense = state.find_expense(self.expense_id)
        if expense is None:
            logger.debug("expense_change at month %d: unknown expense %s", month, self.expense_id)
            return
        expense.amount = self.new_amount


class LumpSumAction(_ActionBase):
    """Pay ``amount`` off a loan's balance, never below zero."""

    type: Literal["lump_sum"] = "lump_sum"
    loan_id: int
    amount: float = Field(gt=0)

    def apply(self, state: SimulationState, month: int) -> None:
        loan = state.find_loan(self.loan_id)
        if loan is None:
            logger.debug("lump_sum at month %d: unknown loan %s", month, self.loan_id)
            return
        loan.balance = max(0.0, loan.balance - self.amount)


class InvestmentChangeAction(_ActionBase):
    """Change an investment's monthly contribution (no-op when omitted)."""

    type: Literal["investment_change"] = "investment_change"
    investment_id: int
    monthly_contribution: Optional[float] = None

    def apply(self, state: SimulationState, month: int) -> None:
        investment = state.find_investment(self.investment_id)
        if investment is None:
            logger.debug(
                "investment_change at month %d: unknown investment %s", month, self.investment_id
            )
            return
        if self.monthly_contribution is not None:
            investment.monthly_contribution = self.monthly_contribution


class NewLoanAction(_ActionBase):
    """Record a credit inquiry. Does not create a loan."""

    type: Literal["new_loan"] = "new_loan"

    def apply(self, state: SimulationState, month: int) -> None:
        state.recent_inquiries += 1


Action = Annotated[
    Union[
        MissedPaymentAction,
        IncomeChangeAction,
        ExpenseChangeAction,
        LumpSumAction,
        InvestmentChangeAction,
        NewLoanAction,
    ],
    Field(discriminator="type"),
]

_ACTION_LIST = TypeAdapter(List[Action])


# ---------------------------------------------------------------------------
# Parsing and scheduling
# ---------------------------------------------------------------------------

def parse_actions(raw: Iterable[Union[Mapping, BaseModel]]) -> List[Action]:
    """
    Validate raw action payloads into typed actions.

    Parameters
    ----------
    raw : iterable of dict or Action
        Payloads with a ``type`` key and a ``month``. Already-typed actions
        pass through unchanged.

    Returns
    -------
    list of Action
        Actions in input order.

    Raises
    ------
    ValidationError
        If any payload is not an object, has an unknown ``type`` or is
        missing a field.
    """
    try:
        items = [
            a.model_dump() if isinstance(a, BaseModel) else dict(a) if isinstance(a, Mapping) else a
            for a in raw
        ]
        return _ACTION_LIST.validate_python(items)
    except PydanticValidationError as e:
        raise ValidationError(f"Invalid action payload: {e}") from e
    except (TypeError, ValueError) as e:
        raise ValidationError(f"Actions must be a list of objects: {e}") from e


def index_actions(actions: Sequence[Action]) -> Dict[int, List[Action]]:
    """Group actions by month, keeping the relative order within a month."""
    by_month: Dict[int, List[Action]] = {}
    for action in actions:
        by_month.setdefault(action.month, []).append(action)
    return by_month


def apply_actions(state: SimulationState, month: int, actions: Sequence[Action]) -> None:
    """Apply ``actions`` to ``state`` in order, mutating it in place."""
    for action in actions:
        action.apply(state, month)

"""
Configuration and record schemas for FinSim.

Purpose
-------
Pydantic models for everything that crosses the boundary of the simulation
core: the persisted records a user owns (incomes, expenses, loans,
investments, credit rule, profile summary), the simulation request, and
application settings loaded from the environment.

Design Principles
-----------------
- Type-safe: Pydantic enforces types and validates ranges
- Immutable: Frozen models prevent accidental mutation; stores replace
  records with ``model_copy(update=...)``
- Serializable: snake_case in Python, camelCase accepted and emitted at the
  JSON boundary (``model_dump(by_alias=True)``)
- Environment-aware: ``AppSettings`` reads ``FINSIM_*`` variables and .env

Example
-------
>>> from finsim.config import LoanRecord, SimulationRequest
>>> loan = LoanRecord.create(id=1, name="Car Loan", original_amount=25_000,
...                          apr=4.5, term_months=60)
>>> round(loan.monthly_payment, 2)
466.08
>>> SimulationRequest(months=24).months
24
"""

from __future__ import annotations

from pathlib import Path
from typing import Dict, List, Literal, Optional

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel
from pydantic_settings import BaseSettings, SettingsConfigDict

from .amortization import monthly_payment
from .constants import (
    DEFAULT_CREDIT_RULE,
    DEFAULT_HORIZON,
    MAX_HORIZON,
    MIN_HORIZON,
    MIN_SCORE,
)

__all__ = [
    "RecordModel",
    "IncomeRecord",
    "ExpenseRecord",
    "LoanRecord",
    "InvestmentRecord",
    "CreditRuleConfig",
    "ProfileSummary",
    "FinancialProfile",
    "TransactionRecord",
    "LoanPaymentRecord",
    "CreditHistoryRecord",
    "UserLedger",
    "SimulationRequest",
    "AppSettings",
]

Frequency = Literal["monthly", "annual"]


class RecordModel(BaseModel):
    """Base for persisted records: frozen, strict keys, camelCase aliases."""

    model_config = ConfigDict(
        frozen=True,
        extra="forbid",
        alias_generator=to_camel,
        populate_by_name=True,
    )


# ---------------------------------------------------------------------------
# Cash-flow streams
# ---------------------------------------------------------------------------

class IncomeRecord(RecordModel):
    """Recurring income (salary, freelance work)."""

    id: int
    name: str = Field(min_length=1, max_length=255)
    amount: float = Field(ge=0, description="Amount per period")
    frequency: Frequency = Field(default="monthly")
    is_active: bool = Field(default=True)


class ExpenseRecord(RecordModel):
    """Recurring expense (rent, groceries, insurance)."""

    id: int
    name: str = Field(min_length=1, max_length=255)
    amount: float = Field(ge=0, description="Amount per period")
    category: str = Field(default="Other", max_length=100)
    frequency: Frequency = Field(default="monthly")
    is_active: bool = Field(default=True)


# ---------------------------------------------------------------------------
# Balances
# ---------------------------------------------------------------------------

class LoanRecord(RecordModel):
    """
    Persisted loan.

    Attributes
    ----------
    original_amount : float
        Principal at origination. Reset target for ``current_balance``.
    current_balance : float
        Outstanding balance; overwritten by simulation write-back.
    apr : float
        Annual percentage rate (4.5 means 4.5%).
    term_months : int
        Amortization term. At least one month.
    monthly_payment : float
        Level payment, fixed at creation time.
    start_month : int
        Simulation month from which the loan is serviced.
    """

    id: int
    name: str = Field(min_length=1, max_length=255)
    original_amount: float = Field(ge=0)
    current_balance: float = Field(ge=0)
    apr: float = Field(ge=0)
    term_months: int = Field(ge=1)
    monthly_payment: float = Field(ge=0)
    start_month: int = Field(default=0, ge=0)
    is_active: bool = Field(default=True)

    @classmethod
    def create(
        cls,
        *,
        id: int,
        name: str,
        original_amount: float,
        apr: float,
        term_months: int,
        start_month: int = 0,
        is_active: bool = True,
    ) -> "LoanRecord":
        """New loan with the payment computed and the balance at principal."""
        return cls(
            id=id,
            name=name,
            original_amount=original_amount,
            current_balance=original_amount,
            apr=apr,
            term_months=term_months,
            monthly_payment=monthly_payment(original_amount, apr, term_months),
            start_month=start_month,
            is_active=is_active,
        )


class InvestmentRecord(RecordModel):
    """Persisted investment account with a fixed expected annual return."""

    id: int
    name: str = Field(min_length=1, max_length=255)
    starting_balance: float = Field(ge=0)
    current_balance: float = Field(ge=0)
    monthly_contribution: float = Field(default=0.0, ge=0)
    annual_return_rate: float = Field(description="Annual return in percent")
    is_active: bool = Field(default=True)


# ---------------------------------------------------------------------------
# Credit rule and profile
# ---------------------------------------------------------------------------

class CreditRuleConfig(RecordModel):
    """
    User-editable credit-rule configuration.

    Stored alongside the user's data and loaded into simulation state, but
    the score model uses its own fixed constants and does not read these
    values.
    """

    base: int = Field(default=300)
    max: int = Field(default=850)
    weights: Dict[str, float] = Field(
        default_factory=lambda: dict(DEFAULT_CREDIT_RULE["weights"])
    )
    penalties: Dict[str, float] = Field(
        default_factory=lambda: dict(DEFAULT_CREDIT_RULE["penalties"])
    )


class ProfileSummary(RecordModel):
    """Profile-level aggregates refreshed after each run."""

    current_net_worth: float = Field(default=0.0)
    current_credit_score: int = Field(default=MIN_SCORE)
    months_simulated: int = Field(default=0, ge=0)


class FinancialProfile(RecordModel):
    """Everything the loader needs for one user."""

    incomes: List[IncomeRecord] = Field(default_factory=list)
    expenses: List[ExpenseRecord] = Field(default_factory=list)
    loans: List[LoanRecord] = Field(default_factory=list)
    investments: List[InvestmentRecord] = Field(default_factory=list)
    credit_rule: CreditRuleConfig = Field(default_factory=CreditRuleConfig)


# ---------------------------------------------------------------------------
# Simulation request
# ---------------------------------------------------------------------------

class SimulationRequest(BaseModel):
    """
    A validated request to run the simulation.

    ``actions`` stays as raw dictionaries here and is parsed into the
    tagged action union by ``finsim.actions.parse_actions``.
    """

    model_config = ConfigDict(frozen=True, extra="forbid")

    months: int = Field(
        default=DEFAULT_HORIZON,
        ge=MIN_HORIZON,
        le=MAX_HORIZON,
        description="Simulation horizon in months",
    )
    actions: List[dict] = Field(
        default_factory=list,
        description="Month-scheduled interventions",
    )


# ---------------------------------------------------------------------------
# Application Settings (Environment Variables)
# ---------------------------------------------------------------------------

class AppSettings(BaseSettings):
    """
    Global application settings loaded from environment variables.

    Environment variables are prefixed with FINSIM_ (e.g.,
    FINSIM_LOG_LEVEL=DEBUG). A .env file in the working directory is read
    when present.

    Attributes
    ----------
    log_level : str
        Logging level: "DEBUG", "INFO", "WARNING", "ERROR"
    data_file : Path
        Default JSON store used by the CLI
    default_months : int
        Horizon used by the CLI when --months is omitted

    Examples
    --------
    >>> settings = AppSettings()
    >>> settings.log_level
    'INFO'
    """

    model_config = SettingsConfigDict(
        env_prefix="FINSIM_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR"] = Field(
        default="INFO",
        description="Logging level"
    )
    data_file: Path = Field(
        default=Path("finsim-data.json"),
        description="JSON store used by the CLI"
    )
    default_months: int = Field(
        default=DEFAULT_HORIZON,
        ge=MIN_HORIZON,
        le=MAX_HORIZON,
        description="Default simulation horizon"
    )
    default_user: Optional[str] = Field(
        default=None,
        description="User id used when --user is omitted"
    )


# ---------------------------------------------------------------------------
# Ledger rows (written back after a run)
# ---------------------------------------------------------------------------

class TransactionRecord(RecordModel):
    """A persisted transaction. Simulation output sets ``is_simulation``."""

    month: int = Field(ge=0)
    type: Literal[
        "income",
        "expense",
        "loan_payment",
        "investment_gain",
        "investment_contribution",
        "lump_sum",
    ]
    category: Optional[str] = Field(default=None, max_length=100)
    description: str = Field(max_length=500)
    amount: float
    related_id: Optional[int] = None
    is_simulation: bool = Field(default=False)


class LoanPaymentRecord(RecordModel):
    """A persisted loan-payment ledger row."""

    loan_id: int
    month: int = Field(ge=0)
    payment_amount: float
    principal_paid: float
    interest_paid: float
    remaining_balance: float
    was_missed: bool = Field(default=False)


class CreditHistoryRecord(RecordModel):
    """A persisted monthly credit score with its breakdown."""

    month: int = Field(ge=0)
    score: int
    breakdown: Dict[str, int] = Field(default_factory=dict)


class UserLedger(RecordModel):
    """One user's stored document: records, ledgers and profile summary."""

    profile: FinancialProfile = Field(default_factory=FinancialProfile)
    summary: ProfileSummary = Field(default_factory=ProfileSummary)
    transactions: List[TransactionRecord] = Field(default_factory=list)
    loan_payments: List[LoanPaymentRecord] = Field(default_factory=list)
    credit_history: List[CreditHistoryRecord] = Field(default_factory=list)

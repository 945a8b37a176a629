"""
Pytest configuration and fixtures for FinSim test suite.

This module provides reusable fixtures for testing all FinSim components.
Fixtures follow the principle of "arrange-act-assert" with clear separation.
"""

import pytest

from finsim.config import (
    ExpenseRecord,
    FinancialProfile,
    IncomeRecord,
    InvestmentRecord,
    LoanRecord,
)
from finsim.demo import demo_profile
from finsim.persistence import InMemoryStore
from finsim.simulation import SimulationService
from finsim.state import load_state


# ---------------------------------------------------------------------------
# Record Fixtures
# ---------------------------------------------------------------------------

@pytest.fixture
def car_loan() -> LoanRecord:
    """
    Secured car loan.

    Principal: $25,000
    APR: 4.5%, 60 months → $466.08/month
    """
    return LoanRecord.create(id=1, name="Car Loan", original_amount=25_000, apr=4.5, term_months=60)


@pytest.fixture
def personal_loan() -> LoanRecord:
    """Unsecured personal loan (name contains neither 'home' nor 'car')."""
    return LoanRecord.create(
        id=2, name="Personal Loan", original_amount=5_000, apr=9.0, term_months=36
    )


@pytest.fixture
def salary() -> IncomeRecord:
    return IncomeRecord(id=1, name="Salary", amount=5_000.00)


@pytest.fixture
def rent() -> ExpenseRecord:
    return ExpenseRecord(id=1, name="Rent", amount=1_500.00, category="Housing")


@pytest.fixture
def retirement() -> InvestmentRecord:
    """401(k) with $500/month contributions at 6% expected return."""
    return InvestmentRecord(
        id=1,
        name="401(k)",
        starting_balance=10_000.00,
        current_balance=10_000.00,
        monthly_contribution=500.00,
        annual_return_rate=6.0,
    )


# ---------------------------------------------------------------------------
# Profile Fixtures
# ---------------------------------------------------------------------------

@pytest.fixture
def simple_profile(salary, rent, car_loan, retirement) -> FinancialProfile:
    """One income, one expense, one loan, one investment."""
    return FinancialProfile(
        incomes=[salary],
        expenses=[rent],
        loans=[car_loan],
        investments=[retirement],
    )


@pytest.fixture
def demo() -> FinancialProfile:
    """The demo household shipped with the CLI."""
    return demo_profile()


@pytest.fixture
def empty_profile() -> FinancialProfile:
    """A user with no records at all."""
    return FinancialProfile()


@pytest.fixture
def simple_state(simple_profile):
    """Fresh simulation state built from ``simple_profile``."""
    return load_state(simple_profile)


# ---------------------------------------------------------------------------
# Store / Service Fixtures
# ---------------------------------------------------------------------------

@pytest.fixture
def store(demo) -> InMemoryStore:
    """In-memory store holding the demo household as user 'demo'."""
    store = InMemoryStore()
    store.add_user("demo", demo)
    return store


@pytest.fixture
def service(store) -> SimulationService:
    return SimulationService(store)

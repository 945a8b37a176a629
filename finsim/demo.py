"""
Demo dataset for FinSim.

A small, realistic household used by the CLI's ``init-demo`` command and by
the test-suite: two income sources ($6,200/month), four expenses
($2,400/month), a car loan and credit-card debt ($28,000 total), and two
investment accounts ($20,000 starting balance).
"""

from __future__ import annotations

from .config import (
    CreditRuleConfig,
    ExpenseRecord,
    FinancialProfile,
    IncomeRecord,
    InvestmentRecord,
    LoanRecord,
)

__all__ = ["demo_profile"]


def demo_profile() -> FinancialProfile:
    """Return the demo household's records."""
    return FinancialProfile(
        incomes=[
            IncomeRecord(id=1, name="Salary", amount=5_000.00),
            IncomeRecord(id=2, name="Freelance Work", amount=1_200.00),
        ],
        expenses=[
            ExpenseRecord(id=1, name="Rent", amount=1_500.00, category="Housing"),
            ExpenseRecord(id=2, name="Groceries", amount=600.00, category="Food"),
            ExpenseRecord(id=3, name="Utilities", amount=200.00, category="Housing"),
            ExpenseRecord(
                id=4,
                name="Car Insurance",
                amount=1_200.00,
                category="Transportation",
                frequency="annual",
            ),
        ],
        loans=[
            LoanRecord.create(id=1, name="Car Loan", original_amount=25_000, apr=4.5, term_months=60),
            LoanRecord.create(
                id=2, name="Credit Card Debt", original_amount=3_000, apr=18.99, term_months=24
            ),
        ],
        investments=[
            InvestmentRecord(
                id=1,
                name="401(k)",
                starting_balance=15_000.00,
                current_balance=15_000.00,
                monthly_contribution=500.00,
                annual_return_rate=7.0,
            ),
            InvestmentRecord(
                id=2,
                name="Emergency Fund",
                starting_balance=5_000.00,
                current_balance=5_000.00,
                monthly_contribution=200.00,
                annual_return_rate=2.5,
            ),
        ],
        credit_rule=CreditRuleConfig(),
    )

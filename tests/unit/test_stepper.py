"""
Unit tests for stepper.py.

Tests the fixed monthly sequence: actions, income, expenses, loan
servicing, investment growth, aggregation and scoring.
"""

import pytest

from finsim.actions import parse_actions
from finsim.config import ExpenseRecord, FinancialProfile, InvestmentRecord, LoanRecord
from finsim.state import load_state
from finsim.stepper import step_month


def _run(state, months, actions=()):
    by_month = {}
    for a in parse_actions(actions):
        by_month.setdefault(a.month, []).append(a)
    return [step_month(m, state, by_month.get(m, ())) for m in range(months)]


class TestSingleMonth:
    """Tests for one step of the simple profile."""

    def test_flows(self, simple_state):
        record, _ = step_month(0, simple_state)

        assert record.month == 0
        assert record.income == 5_000
        assert record.expenses == 1_500
        assert record.loan_payments == pytest.approx(466.08, abs=0.01)
        assert record.investment_contributions == 500
        # (10,000 + 500) * 0.5%
        assert record.investment_gains == pytest.approx(52.5)

    def test_cashflow_excludes_contributions(self, simple_state):
        record, _ = step_month(0, simple_state)
        expected = record.income - record.expenses - record.loan_payments + record.investment_gains

        assert record.cashflow == pytest.approx(expected)

    def test_balances(self, simple_state):
        record, _ = step_month(0, simple_state)

        assert record.total_assets == pytest.approx(10_552.5)
        assert record.total_debt == pytest.approx(24_627.67, abs=0.01)
        assert record.net_worth == pytest.approx(record.total_assets - record.total_debt)

    def test_loan_split(self, simple_state):
        step_month(0, simple_state)
        (entry,) = simple_state.payment_log

        assert entry.interest_paid == pytest.approx(93.75)
        assert entry.principal_paid == pytest.approx(372.33, abs=0.01)
        assert entry.remaining_balance == pytest.approx(24_627.67, abs=0.01)
        assert entry.was_missed is False

        loan = simple_state.loans[0]
        assert loan.months_paid == 1
        assert loan.total_payments == 1
        assert loan.consecutive_on_time == 1

    def test_transaction_order(self, simple_state):
        record, _ = step_month(0, simple_state)

        assert [t.type for t in record.transactions] == [
            "income",
            "expense",
            "loan_payment",
            "investment_contribution",
            "investment_gain",
        ]
        assert record.transactions[1].category == "Housing"
        assert record.transactions[2].description == "Car Loan payment"

    def test_score_matches_record(self, simple_state):
        record, score = step_month(0, simple_state)

        assert score.month == 0
        assert score.score == record.credit_score
        assert score.category == record.credit_category

    def test_credit_age_advances(self, simple_state):
        _run(simple_state, 3)
        assert simple_state.credit_age == 3


class TestMissedPayment:
    """A logged missed payment skips servicing for that loan and month."""

    def test_balance_unchanged(self, simple_state):
        records = _run(simple_state, 1, [{"type": "missed_payment", "month": 0, "loanId": 1}])
        record, _ = records[0]

        assert record.loan_payments == 0
        assert record.total_debt == 25_000
        assert "loan_payment" not in [t.type for t in record.transactions]

    def test_ledger_row_and_counters(self, simple_state):
        _run(simple_state, 3, [{"type": "missed_payment", "month": 1, "loanId": 1}])
        missed = [p for p in simple_state.payment_log if p.was_missed]

        assert len(missed) == 1
        assert missed[0].month == 1
        assert missed[0].payment_amount == 0.0
        assert missed[0].principal_paid == 0.0
        loan = simple_state.loans[0]
        assert loan.missed_payments == 1
        assert loan.consecutive_on_time == 1  # reset at month 1, paid at month 2
        assert loan.months_paid == 2

    def test_lowers_payment_history(self, simple_profile):
        baseline = _run(load_state(simple_profile), 3)
        missed = _run(
            load_state(simple_profile), 3, [{"type": "missed_payment", "month": 2, "loanId": 1}]
        )

        assert baseline[2][1].breakdown.payment_history == 200
        # 200 - 40 (in the last 12 months) - 20 (lifetime)
        assert missed[2][1].breakdown.payment_history == 140
        assert missed[2][0].credit_score < baseline[2][0].credit_score


class TestLoanServicing:
    def test_future_loan_not_serviced(self):
        state = load_state(
            FinancialProfile(
                loans=[
                    LoanRecord.create(
                        id=1, name="Student Loan", original_amount=1_200, apr=0, term_months=12, start_month=2
                    )
                ]
            )
        )
        records = _run(state, 3)

        assert [r.loan_payments for r, _ in records] == [0, 0, 100]

    def test_paid_off_loan_stops(self):
        state = load_state(
            FinancialProfile(
                loans=[
                    LoanRecord.create(id=1, name="Student Loan", original_amount=1_200, apr=0, term_months=12)
                ]
            )
        )
        records = _run(state, 14)

        assert records[11][0].total_debt == 0
        assert records[12][0].loan_payments == 0
        assert len(state.payment_log) == 12

    def test_final_payment_clears_balance_exactly(self):
        state = load_state(
            FinancialProfile(
                loans=[LoanRecord.create(id=1, name="Loan", original_amount=1_000, apr=12, term_months=3)]
            )
        )
        _run(state, 5)

        assert state.loans[0].balance == pytest.approx(0.0, abs=1e-9)
        assert state.loans[0].balance >= 0

    def test_lump_sum_then_service(self, simple_state):
        records = _run(simple_state, 1, [{"type": "lump_sum", "month": 0, "loanId": 1, "amount": 30_000}])
        record, score = records[0]

        assert record.total_debt == 0
        assert record.loan_payments == 0
        assert score.breakdown.utilization == 150


class TestInvestments:
    def test_negative_return_no_gain_transaction(self):
        state = load_state(
            FinancialProfile(
                investments=[
                    InvestmentRecord(
                        id=1, name="Crypto", starting_balance=1_000, current_balance=1_000, annual_return_rate=-12
                    )
                ]
            )
        )
        record, _ = step_month(0, state)

        assert record.investment_gains == pytest.approx(-10.0)
        assert record.total_assets == pytest.approx(990.0)
        assert record.transactions == ()

    def test_zero_contribution_no_contribution_transaction(self):
        state = load_state(
            FinancialProfile(
                investments=[
                    InvestmentRecord(
                        id=1, name="Savings", starting_balance=1_200, current_balance=1_200, annual_return_rate=1
                    )
                ]
            )
        )
        record, _ = step_month(0, state)

        assert [t.type for t in record.transactions] == ["investment_gain"]
        assert record.investment_gains == pytest.approx(1.0)

    def test_contribution_change_applies_same_month(self, simple_state):
        records = _run(
            simple_state, 1, [{"type": "investment_change", "month": 0, "investmentId": 1, "monthlyContribution": 0}]
        )
        assert records[0][0].investment_contributions == 0


class TestCashflowStreams:
    def test_annual_expense_spread_monthly(self):
        state = load_state(
            FinancialProfile(
                expenses=[ExpenseRecord(id=1, name="Insurance", amount=1_200, frequency="annual")]
            )
        )
        record, _ = step_month(0, state)

        assert record.expenses == 100
        assert record.cashflow == -100

    def test_income_change_persists(self, simple_state):
        records = _run(
            simple_state, 4, [{"type": "income_change", "month": 2, "incomeId": 1, "newAmount": 6_000}]
        )
        assert [r.income for r, _ in records] == [5_000, 5_000, 6_000, 6_000]


class TestDefaultTracking:
    def test_months_since_default_advances_only_when_defaulted(self, simple_state):
        _run(simple_state, 2)
        assert simple_state.months_since_default == 0

        simple_state.has_default = True
        for month in range(2, 5):
            step_month(month, simple_state)
        assert simple_state.months_since_default == 3


class TestLongRunConsistency:
    """Aggregates and the payment ledger agree month after month."""

    def test_demo_totals_match_ledger(self, demo):
        state = load_state(demo)
        actions = [
            {"type": "missed_payment", "month": 3, "loanId": 1},
            {"type": "lump_sum", "month": 10, "loanId": 1, "amount": 500},
        ]
        records = _run(state, 72, actions)

        latest = {}
        seen = 0
        for record, _ in records:
            rows = [p for p in state.payment_log if p.month == record.month]
            seen += len(rows)
            for row in rows:
                latest[row.loan_id] = row.remaining_balance

            assert record.total_debt == pytest.approx(sum(latest.values()), abs=1e-6)
            assert record.total_assets > 0

        assert seen == len(state.payment_log)
        assert records[-1][0].total_debt == pytest.approx(0.0, abs=1e-6)
        assert records[-1][0].total_assets == pytest.approx(
            sum(i.balance for i in state.investments)
        )

    def test_assets_match_investment_balances_each_month(self, demo):
        state = load_state(demo)
        for month in range(60):
            record, _ = step_month(month, state)
            assert record.total_assets == pytest.approx(sum(i.balance for i in state.investments))
            assert record.total_debt == pytest.approx(sum(l.balance for l in state.loans))
            assert record.net_worth == pytest.approx(record.total_assets - record.total_debt)

    def test_ledger_balances_never_rise(self, demo):
        state = load_state(demo)
        _run(state, 72, [{"type": "missed_payment", "month": 3, "loanId": 1}])

        for loan in state.loans:
            balances = [p.remaining_balance for p in state.payment_log if p.loan_id == loan.id]
            assert balances
            assert all(b >= 0 for b in balances)
            assert all(later <= earlier for earlier, later in zip(balances, balances[1:]))
            assert balances[-1] == pytest.approx(0.0, abs=1e-6)

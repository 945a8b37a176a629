"""
Unit tests for credit.py.

Tests each score component, the category boundaries and clamping.
"""

import pytest

from finsim.credit import (
    CreditBreakdown,
    credit_age_score,
    credit_category,
    credit_mix_score,
    debt_to_income_score,
    inquiry_score,
    payment_history_score,
    recovery_score,
    score_credit,
    utilization_score,
)
from finsim.state import IncomeStream, LoanState, MissedPayment, SimulationState


def _loan(id=1, *, name="Personal Loan", balance=1_000.0, original=1_000.0, payment=100.0, **kwargs):
    return LoanState(
        id=id,
        name=name,
        balance=balance,
        original_amount=original,
        apr=5.0,
        term_months=12,
        monthly_payment=payment,
        **kwargs,
    )


class TestCategory:
    @pytest.mark.parametrize(
        "score, category",
        [
            (900, "Excellent"),
            (850, "Excellent"),
            (849, "Very Good"),
            (750, "Very Good"),
            (749, "Good"),
            (650, "Good"),
            (649, "Fair"),
            (550, "Fair"),
            (549, "Poor"),
            (300, "Poor"),
        ],
    )
    def test_inclusive_thresholds(self, score, category):
        assert credit_category(score) == category


class TestPaymentHistory:
    def test_no_loans(self):
        assert payment_history_score(0, SimulationState()) == 0

    def test_no_payments_yet(self):
        assert payment_history_score(0, SimulationState(loans=[_loan()])) == 150

    def test_clean_history(self):
        state = SimulationState(loans=[_loan(consecutive_on_time=3)])
        assert payment_history_score(2, state) == 200

    @pytest.mark.parametrize("streak, bonus", [(5, 0), (6, 15), (12, 30), (24, 50)])
    def test_streak_bonus(self, streak, bonus):
        state = SimulationState(loans=[_loan(consecutive_on_time=streak)])
        assert payment_history_score(streak, state) == 200 + bonus

    def test_recent_missed_payment(self):
        state = SimulationState(
            loans=[_loan(missed_payments=1)],
            missed_log=[MissedPayment(loan_id=1, month=3)],
        )
        assert payment_history_score(3, state) == 140

    def test_window_includes_twelve_months_back(self):
        state = SimulationState(
            loans=[_loan(missed_payments=1)],
            missed_log=[MissedPayment(loan_id=1, month=3)],
        )
        assert payment_history_score(15, state) == 140
        # Outside the window only the lifetime penalty remains.
        assert payment_history_score(16, state) == 180

    def test_floor_at_zero(self):
        state = SimulationState(
            loans=[_loan(missed_payments=6)],
            missed_log=[MissedPayment(loan_id=1, month=m) for m in range(6)],
        )
        assert payment_history_score(5, state) == 0

    def test_average_streak_across_loans(self):
        state = SimulationState(loans=[_loan(1, consecutive_on_time=24), _loan(2, consecutive_on_time=0)])
        assert payment_history_score(23, state) == 230


class TestUtilization:
    @pytest.mark.parametrize(
        "balance, points",
        [(0, 150), (299, 150), (300, 100), (499, 100), (500, 50), (749, 50), (750, 20), (899, 20), (900, 0), (1_000, 0)],
    )
    def test_bands(self, balance, points):
        state = SimulationState(loans=[_loan(balance=balance, original=1_000)])
        assert utilization_score(state) == points

    def test_no_loans(self):
        assert utilization_score(SimulationState()) == 0

    def test_zero_original_amount(self):
        state = SimulationState(loans=[_loan(balance=0, original=0)])
        assert utilization_score(state) == 150


class TestCreditAge:
    @pytest.mark.parametrize(
        "months, points",
        [(0, 5), (5, 5), (6, 15), (12, 30), (24, 50), (36, 70), (60, 85), (84, 100), (360, 100)],
    )
    def test_bands(self, months, points):
        assert credit_age_score(months) == points


class TestCreditMix:
    def test_none(self):
        assert credit_mix_score(SimulationState()) == 0

    def test_secured_only(self):
        assert credit_mix_score(SimulationState(loans=[_loan(loan_type="secured")])) == 40

    def test_unsecured_only(self):
        assert credit_mix_score(SimulationState(loans=[_loan(loan_type="unsecured")])) == 20

    def test_both(self):
        state = SimulationState(loans=[_loan(1, loan_type="secured"), _loan(2, loan_type="unsecured")])
        assert credit_mix_score(state) == 60


class TestDebtToIncome:
    def test_no_income_scores_full(self):
        assert debt_to_income_score(SimulationState(loans=[_loan(payment=5_000)])) == 60

    @pytest.mark.parametrize("payment, points", [(349, 60), (350, 40), (499, 40), (500, 15), (699, 15), (700, 0)])
    def test_bands(self, payment, points):
        state = SimulationState(
            loans=[_loan(payment=payment)],
            incomes=[IncomeStream(id=1, name="Salary", amount=1_000)],
        )
        assert debt_to_income_score(state) == points

    def test_counts_unserviced_loans(self):
        """Fixed payments count even when the loan is paid off or not started."""
        state = SimulationState(
            loans=[_loan(balance=0, payment=800)],
            incomes=[IncomeStream(id=1, name="Salary", amount=1_000)],
        )
        assert debt_to_income_score(state) == 0


class TestInquiriesAndRecovery:
    @pytest.mark.parametrize("count, points", [(0, 30), (1, 20), (2, 10), (3, 0), (5, 0)])
    def test_inquiries(self, count, points):
        assert inquiry_score(count) == points

    def test_recovery_inert_without_default(self):
        assert recovery_score(SimulationState(months_since_default=36)) == 0

    @pytest.mark.parametrize("months, points", [(0, 0), (11, 0), (12, 10), (18, 20), (24, 30)])
    def test_recovery_bands(self, months, points):
        state = SimulationState(has_default=True, months_since_default=months)
        assert recovery_score(state) == points


class TestScoreCredit:
    """Tests for score_credit()."""

    def test_empty_state(self):
        result = score_credit(0, SimulationState(credit_age=1))

        assert result.score == 395
        assert result.category == "Poor"
        assert result.breakdown == CreditBreakdown(credit_age=5, debt_to_income=60, recent_inquiries=30)

    def test_score_is_base_plus_breakdown(self, simple_state):
        simple_state.credit_age = 1
        result = score_credit(0, simple_state)
        assert result.score == 300 + result.breakdown.total

    def test_maximum_state(self):
        state = SimulationState(
            loans=[
                _loan(1, balance=0, loan_type="secured", consecutive_on_time=24),
                _loan(2, balance=0, loan_type="unsecured", consecutive_on_time=24),
            ],
            credit_age=84,
            has_default=True,
            months_since_default=24,
        )
        result = score_credit(83, state)

        # 250 + 150 + 100 + 60 + 60 + 30 + 30
        assert result.breakdown.total == 680
        assert result.score == 900
        assert result.category == "Excellent"

    def test_does_not_mutate_state(self, simple_state):
        simple_state.credit_age = 7
        score_credit(6, simple_state)
        assert simple_state.credit_age == 7
        assert simple_state.months_since_default == 0

    def test_ignores_stored_credit_rule(self, simple_state):
        from finsim.config import CreditRuleConfig

        before = score_credit(0, simple_state)
        simple_state.credit_rule = CreditRuleConfig(base=500, weights={"payment_history": 1.0})
        assert score_credit(0, simple_state) == before


class TestBreakdown:
    def test_to_dict_camel(self):
        data = CreditBreakdown(payment_history=200, debt_to_income=60).to_dict(camel=True)

        assert data["paymentHistory"] == 200
        assert data["debtToIncome"] == 60
        assert set(data) == {
            "paymentHistory",
            "utilization",
            "creditAge",
            "creditMix",
            "debtToIncome",
            "recentInquiries",
            "recovery",
        }

    def test_total(self):
        assert CreditBreakdown(payment_history=1, utilization=2, recovery=3).total == 6

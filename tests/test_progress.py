"""Tests for the progress presenter.

**Feature: prop-firm-tracking**
"""

from decimal import Decimal

from hypothesis import given, settings
from hypothesis import strategies as st

from deltalytix.metrics.progress import classify_risk, compute_progress_view
from deltalytix.models import AccountConfiguration, DerivedBalanceState, RiskBucket


def make_state(balance, floor) -> DerivedBalanceState:
    balance = Decimal(str(balance))
    floor = Decimal(str(floor))
    return DerivedBalanceState(
        current_balance=balance,
        max_drawdown_level=floor,
        distance_to_drawdown=balance - floor,
        current_profits=balance - Decimal("10000"),
        highest_balance=max(balance, Decimal("10000")),
        total_paid_payouts=Decimal("0"),
    )


def make_account(target="1000", drawdown="500") -> AccountConfiguration:
    return AccountConfiguration(
        account_number="ACC1",
        starting_balance=Decimal("10000"),
        profit_target=Decimal(target),
        drawdown_threshold=Decimal(drawdown),
    )


class TestRiskBuckets:
    """Distance percentages map to safe, warning and danger."""

    def test_bucket_boundaries(self):
        assert classify_risk(Decimal("3.01")) == RiskBucket.SAFE
        assert classify_risk(Decimal("3")) == RiskBucket.WARNING
        assert classify_risk(Decimal("1.5")) == RiskBucket.WARNING
        assert classify_risk(Decimal("1")) == RiskBucket.DANGER
        assert classify_risk(Decimal("-4")) == RiskBucket.DANGER

    def test_undefined_distance_is_danger(self):
        assert classify_risk(None) == RiskBucket.DANGER


class TestProgressView:
    """Percentages for configured accounts, a setup prompt otherwise."""

    def test_configured_account(self):
        view = compute_progress_view(make_state(10800, 9500), make_account())

        assert view.is_configured
        assert view.progress_percentage == Decimal("1080")
        assert view.distance_percentage == Decimal("1300") / Decimal("10800") * 100
        assert view.risk_bucket == RiskBucket.SAFE
        assert view.remaining_to_target == Decimal("200")

    def test_drawdown_progress(self):
        view = compute_progress_view(make_state(9700, 9500), make_account())

        # 200 of the 500 allowance is left, so 60% is used
        assert view.drawdown_progress == Decimal("60")
        assert 1 < view.distance_percentage < 3
        assert view.risk_bucket == RiskBucket.WARNING

    def test_zero_profit_target_is_unconfigured(self):
        view = compute_progress_view(make_state(10800, 9500), make_account(target="0"))

        assert not view.is_configured
        assert view.progress_percentage is None
        assert view.distance_percentage is None
        assert view.risk_bucket is None

    def test_zero_drawdown_is_unconfigured(self):
        view = compute_progress_view(make_state(10800, 10800), make_account(drawdown="0"))

        assert not view.is_configured
        assert view.progress_percentage is None

    def test_wiped_out_balance_has_no_distance_percentage(self):
        view = compute_progress_view(make_state(0, 9500), make_account())

        assert view.distance_percentage is None
        assert view.risk_bucket == RiskBucket.DANGER

    def test_negative_balance_has_no_distance_percentage(self):
        view = compute_progress_view(make_state(-250, 9500), make_account())

        assert view.distance_percentage is None
        assert view.risk_bucket == RiskBucket.DANGER

    @given(
        target=st.decimals(min_value=Decimal("-1000"), max_value=Decimal("0"), places=2),
        drawdown=st.decimals(min_value=Decimal("0"), max_value=Decimal("5000"), places=2),
        balance=st.decimals(min_value=Decimal("-5000"), max_value=Decimal("50000"), places=2),
    )
    @settings(max_examples=100)
    def test_unconfigured_never_has_percentages(self, target, drawdown, balance):
        """
        *For any* account without a positive profit target, no percentage
        is computed.
        """
        account = make_account(target=str(target), drawdown=str(drawdown))

        view = compute_progress_view(make_state(balance, 9500), account)

        assert not view.is_configured
        assert view.progress_percentage is None
        assert view.distance_percentage is None
        assert view.risk_bucket is None

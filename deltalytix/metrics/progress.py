"""Turns a balance state into progress and risk signals for display."""

from decimal import Decimal
from typing import Optional

from deltalytix.models import AccountConfiguration, DerivedBalanceState, ProgressView, RiskBucket

HUNDRED = Decimal("100")

# Distance-to-drawdown percentages above which an account is safe / warned.
SAFE_ABOVE = Decimal("3")
WARNING_ABOVE = Decimal("1")


def classify_risk(distance_percentage: Optional[Decimal]) -> RiskBucket:
    """Map a distance-to-drawdown percentage to a risk bucket.

    An undefined percentage (no positive balance left) is ``DANGER``.
    """
    if distance_percentage is None:
        return RiskBucket.DANGER
    if distance_percentage > SAFE_ABOVE:
        return RiskBucket.SAFE
    if distance_percentage > WARNING_ABOVE:
        return RiskBucket.WARNING
    return RiskBucket.DANGER


def compute_progress_view(
    state: DerivedBalanceState, account: AccountConfiguration
) -> ProgressView:
    """Derive progress percentages and the risk bucket.

    Unconfigured accounts (no profit target or no drawdown threshold) get
    no numbers at all so callers show a setup prompt instead.
    """
    if not account.is_configured:
        return ProgressView(is_configured=False)

    progress = state.current_balance / account.profit_target * HUNDRED

    distance_pct: Optional[Decimal] = None
    if state.current_balance > 0:
        distance_pct = state.distance_to_drawdown / state.current_balance * HUNDRED

    profit = state.current_balance - account.starting_balance
    remaining = max(Decimal("0"), account.profit_target - profit)

    remaining_loss = max(Decimal("0"), state.distance_to_drawdown)
    threshold = account.drawdown_threshold
    drawdown_progress = (threshold - remaining_loss) / threshold * HUNDRED

    return ProgressView(
        is_configured=True,
        progress_percentage=progress,
        distance_percentage=distance_pct,
        risk_bucket=classify_risk(distance_pct),
        remaining_to_target=remaining,
        drawdown_progress=drawdown_progress,
    )

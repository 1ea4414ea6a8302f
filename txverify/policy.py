"""Amount reconciliation and confirmation depth."""

from decimal import Decimal
from typing import NamedTuple

# Relative, so it scales with price; absorbs quote vs fee-adjusted settlement
AMOUNT_TOLERANCE = Decimal("0.05")


def reconcile(expected: Decimal, actual: Decimal, tolerance: Decimal = AMOUNT_TOLERANCE) -> bool:
    """True if ``actual`` is within ``expected * tolerance`` of ``expected``.

    Both bounds are inclusive. ``expected`` must already be positive.
    """
    return abs(actual - expected) <= expected * tolerance


class ConfirmationResult(NamedTuple):
    confirmations: int
    meets_threshold: bool


def count_confirmations(block_height: int, current_height: int) -> int:
    """Inclusive depth: the transaction's own block is confirmation 1.

    Clamped at zero when the height lookup saw an older chain tip than the
    transaction lookup did.
    """
    return max(0, current_height - block_height + 1)


def evaluate_confirmations(
    block_height: int, current_height: int, minimum: int
) -> ConfirmationResult:
    confirmations = count_confirmations(block_height, current_height)
    return ConfirmationResult(confirmations, confirmations >= minimum)

"""
Money rounding. Applied once, at the edge of money-producing functions.
"""

from decimal import Decimal, ROUND_FLOOR, ROUND_HALF_UP
from typing import Dict, Hashable, Mapping, Optional

CENT = Decimal("0.01")


def round_money(amount: float) -> float:
    """Round to cents, halves away from zero (as the trip spreadsheets do)."""
    return float(Decimal(str(amount)).quantize(CENT, rounding=ROUND_HALF_UP))


def allocate_cents(shares: Mapping[Hashable, float], total: Optional[float] = None) -> Dict[Hashable, float]:
    """
    Round shares of a pot to cents without paying out more than the pot.

    Every share is rounded down to the cent, then the cents left over go one
    at a time to the largest remainders (earlier keys first on a tie), so
    the results add up to exactly the total rounded to cents.

    Args:
        shares: Key -> unrounded amount
        total: Amount being shared out (defaults to the sum of shares)

    Returns:
        Key -> amount in cents, same keys and order as shares
    """
    if not shares:
        return {}
    if total is None:
        total = sum(shares.values())

    target = int(Decimal(str(total)).quantize(CENT, rounding=ROUND_HALF_UP) / CENT)
    exact = {key: Decimal(str(amount)) / CENT for key, amount in shares.items()}
    cents = {key: int(value.to_integral_value(rounding=ROUND_FLOOR)) for key, value in exact.items()}

    leftover = target - sum(cents.values())
    if leftover > 0:
        by_remainder = sorted(exact, key=lambda key: exact[key] - cents[key], reverse=True)
        for key in by_remainder[:leftover]:
            cents[key] += 1

    return {key: float(Decimal(value) * CENT) for key, value in cents.items()}

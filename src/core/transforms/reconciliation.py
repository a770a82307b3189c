"""
Numeric reconciliation of sales line amounts and unit prices.

Repairs are applied in a fixed order: the line amount first, then the unit
price. Negative prices are treated as sign errors, not discounts. The
quantity is never repaired; quality rules report bad quantities instead.
"""

import math
from typing import NamedTuple

AMOUNT_TOLERANCE = 1e-9


class ReconciledLine(NamedTuple):
    """Reconciled numeric fields of a sales line."""

    quantity: int | None
    unit_price: float | None
    line_amount: float | None
    amount_repaired: bool
    price_repaired: bool


def _is_missing_or_non_positive(value: float | None) -> bool:
    return value is None or value <= 0


def reconcile_amount(
    quantity: int | None,
    unit_price: float | None,
    line_amount: float | None,
) -> tuple[float | None, bool]:
    """
    Repair the line amount.

    With a known price the amount must equal quantity * |price|; a null,
    non-positive or inconsistent amount is recomputed. Without a price, a
    null or non-positive amount resolves through the zero-price path
    (quantity * 0). An unknown quantity leaves the amount untouched.

    Returns:
        Tuple of (amount, derived_from_price) where derived_from_price is
        False when the amount came from the zero-price path
    """
    if quantity is None:
        return line_amount, True

    if unit_price is None:
        if _is_missing_or_non_positive(line_amount):
            return float(quantity * 0), False
        return line_amount, True

    expected = quantity * abs(unit_price)
    if _is_missing_or_non_positive(line_amount) or not math.isclose(
        line_amount, expected, rel_tol=AMOUNT_TOLERANCE, abs_tol=AMOUNT_TOLERANCE
    ):
        return float(expected), True
    return line_amount, True


def reconcile_price(
    quantity: int | None,
    unit_price: float | None,
    line_amount: float | None,
) -> float | None:
    """
    Repair the unit price.

    A null or non-positive price is recomputed as amount / quantity. A zero
    or unknown quantity, or an unknown amount, yields None (unrecoverable).
    """
    if not _is_missing_or_non_positive(unit_price):
        return unit_price
    if not quantity or line_amount is None:
        return None
    return line_amount / quantity


def reconcile_line(
    quantity: int | None,
    unit_price: float | None,
    line_amount: float | None,
) -> ReconciledLine:
    """
    Reconcile the numeric fields of one sales line.

    The price repair reads the reconciled amount, except when that amount
    came from the zero-price path: a line lacking both amount and price has
    nothing to derive a price from.

    Examples:
        >>> reconcile_line(3, 10, 25).line_amount
        30.0
        >>> reconcile_line(3, None, 30).unit_price
        10.0
        >>> line = reconcile_line(0, None, None)
        >>> (line.line_amount, line.unit_price)
        (0.0, None)
    """
    amount, derived_from_price = reconcile_amount(quantity, unit_price, line_amount)
    price_basis = amount if derived_from_price else None
    price = reconcile_price(quantity, unit_price, price_basis)

    return ReconciledLine(
        quantity=quantity,
        unit_price=price,
        line_amount=amount,
        amount_repaired=amount != line_amount,
        price_repaired=price != unit_price,
    )

"""Money helpers.

Amounts travel as two-place decimal strings on events and aggregates and are
handled as ``Decimal`` everywhere else.
"""

from decimal import ROUND_HALF_UP, Decimal, InvalidOperation

from marketplace.errors import InvalidAmount

CENT = Decimal("0.01")
ZERO = Decimal("0.00")

# Largest gap tolerated between a payment amount and the order total
AMOUNT_TOLERANCE = CENT


def to_money(value, field: str = "amount") -> Decimal:
    """Coerce ``value`` to a Decimal quantized to cents.

    Floats go through ``str`` first so that ``12.1`` becomes ``12.10`` and not
    its binary expansion.
    """
    if isinstance(value, Decimal):
        amount = value
    else:
        try:
            amount = Decimal(str(value).strip())
        except (InvalidOperation, ValueError) as exc:
            raise InvalidAmount(f"{value!r} is not a valid amount", field=field) from exc
    if not amount.is_finite():
        raise InvalidAmount(f"{value!r} is not a valid amount", field=field)
    return amount.quantize(CENT, rounding=ROUND_HALF_UP)


def format_money(value) -> str:
    return str(to_money(value))


def positive_money(value, field: str = "amount") -> Decimal:
    amount = to_money(value, field=field)
    if amount <= ZERO:
        raise InvalidAmount(f"{field.replace('_', ' ').capitalize()} must be positive", field=field)
    return amount


def within_tolerance(first, second, tolerance: Decimal = AMOUNT_TOLERANCE) -> bool:
    return abs(to_money(first) - to_money(second)) <= tolerance


def is_full_amount(part, whole) -> bool:
    """True when ``part`` equals ``whole`` to the cent."""
    return abs(to_money(part) - to_money(whole)) < CENT

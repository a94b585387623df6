"""Stay pricing — nightly rate times nights plus a one-time cleaning fee."""

from datetime import date
from decimal import Decimal

_CENTS = Decimal("0.01")


def count_nights(check_in: date, check_out: date) -> int:
    """Whole nights between two calendar dates.

    Plain ``date`` subtraction, never timestamps, so daylight-saving shifts
    cannot add or drop a night.
    """
    return (check_out - check_in).days


def calculate_price(
    nightly_rate: Decimal | int | float | str,
    cleaning_fee: Decimal | int | float | str | None,
    nights: int,
) -> Decimal:
    """Return ``nightly_rate * nights + cleaning_fee`` rounded to cents.

    >>> calculate_price(100, 50, 3)
    Decimal('350.00')
    >>> calculate_price(100, None, 3)
    Decimal('300.00')
    """
    if nights < 0:
        raise ValueError("nights must not be negative")
    rate = Decimal(str(nightly_rate))
    fee = Decimal(str(cleaning_fee)) if cleaning_fee is not None else Decimal("0")
    return (rate * nights + fee).quantize(_CENTS)

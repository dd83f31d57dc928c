import re
from decimal import ROUND_HALF_DOWN, ROUND_HALF_UP, Decimal, InvalidOperation
from typing import Union

# Type alias for money values
Money = Decimal

ZERO = Decimal("0.00")

_INT_PREFIX = re.compile(r"\s*([+-]?\d+)")


def round_money(value: Union[Decimal, float, int, str]) -> Decimal:
    """
    Round monetary value to 2 decimal places using ROUND_HALF_UP.

    Examples:
        >>> round_money(10.125)
        Decimal('10.13')
        >>> round_money(10.124)
        Decimal('10.12')
        >>> round_money("10.115")
        Decimal('10.12')
    """
    if not isinstance(value, Decimal):
        value = Decimal(str(value))
    if value < 0:
        return value.quantize(Decimal("0.01"), rounding=ROUND_HALF_DOWN)
    return value.quantize(Decimal("0.01"), rounding=ROUND_HALF_UP)


def parse_money(
    value: Union[Decimal, float, int, str, None],
    default: Union[Decimal, int, str] = ZERO,
) -> Decimal:
    """
    Parse a stored amount (decimal string or number) into a 2-place Decimal.

    Never raises: None, blank, non-numeric and non-finite input all fall back
    to ``default``.

    Examples:
        >>> parse_money("50")
        Decimal('50.00')
        >>> parse_money("n/a", default="20")
        Decimal('20.00')
    """
    fallback = round_money(default)
    if value is None or isinstance(value, bool):
        return fallback
    if isinstance(value, str):
        value = value.strip()
        if not value:
            return fallback
    try:
        parsed = value if isinstance(value, Decimal) else Decimal(str(value))
        if not parsed.is_finite():
            return fallback
        return round_money(parsed)
    except (InvalidOperation, ValueError):
        return fallback


def parse_optional_money(value: Union[Decimal, float, int, str, None]) -> Decimal | None:
    """Parse a numeric setting without rounding; None when absent or unparsable."""
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, str) and not value.strip():
        return None
    try:
        parsed = value if isinstance(value, Decimal) else Decimal(str(value).strip())
    except (InvalidOperation, ValueError):
        return None
    if not parsed.is_finite():
        return None
    return parsed


def parse_int_prefix(value: Union[int, str, None], default: int | None = 0) -> int | None:
    """
    Parse the leading integer of a value ("2030" -> 2030, "2030b" -> 2030).

    Used for graduation years and the school year setting, which are stored as
    free-form strings. Anything without a leading integer returns ``default``.
    """
    if value is None or isinstance(value, bool):
        return default
    if isinstance(value, int):
        return value
    match = _INT_PREFIX.match(str(value))
    if not match:
        return default
    return int(match.group(1))

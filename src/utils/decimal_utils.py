"""Helpers for Decimal normalization and GnuCash fraction conversions."""

from decimal import ROUND_HALF_UP, Decimal

_MONEY_QUANT = Decimal("0.01")


def coerce_decimal(value) -> Decimal:
    """Normalize numeric values to Decimal.

    Args:
        value: Raw numeric value from SQL or adapters.

    Returns:
        Decimal: Normalized numeric value.
    """
    if value is None:
        return Decimal("0")
    if isinstance(value, Decimal):
        return value
    return Decimal(str(value))


def round_money(value: Decimal) -> Decimal:
    """Round an amount to two decimals, half away from zero.

    Args:
        value: Unrounded amount.

    Returns:
        Decimal: Amount quantized to cents.
    """
    return coerce_decimal(value).quantize(_MONEY_QUANT, rounding=ROUND_HALF_UP)


def to_decimal(num, denom) -> str:
    """Convert a GnuCash fraction into its decimal string.

    The fractional part is padded to the scale of the denominator
    (``len(str(denom)) - 1`` digits) and omitted when the remainder is zero.
    A zero denominator yields ``"0"`` instead of raising.

    Args:
        num: Numerator as int, str or integral Decimal.
        denom: Denominator as int, str or integral Decimal.

    Returns:
        str: Decimal representation, e.g. ``to_decimal(150, 100) == "1.50"``.
    """
    numerator = int(num)
    denominator = int(denom)
    if denominator == 0:
        return "0"
    if denominator < 0:
        numerator, denominator = -numerator, -denominator

    sign = "-" if numerator < 0 else ""
    integer_part, remainder = divmod(abs(numerator), denominator)
    if remainder == 0:
        return f"{sign}{integer_part}"

    precision = len(str(denominator)) - 1
    if denominator == 10**precision:
        return f"{sign}{integer_part}.{str(remainder).zfill(precision)}"

    scale = _terminating_scale(denominator)
    if scale is None:
        scale = max(precision, 2)
    scaled, rest = divmod(abs(numerator) * 10**scale, denominator)
    if rest * 2 >= denominator:
        scaled += 1
    if scaled == 0:
        sign = ""
    integer_part, fraction_part = divmod(scaled, 10**scale)
    return f"{sign}{integer_part}.{str(fraction_part).zfill(scale)}"


def from_decimal(value, denom: int = 100) -> tuple[int, int]:
    """Convert a decimal amount into a GnuCash fraction.

    Rounding is half away from zero, so ``from_decimal(1.999, 100)`` returns
    ``(200, 100)``. Float inputs go through their string form to avoid binary
    noise.

    Args:
        value: Amount as Decimal, int, float or numeric string.
        denom: Target denominator, kept unchanged in the result.

    Returns:
        tuple[int, int]: Numerator and denominator.
    """
    if int(denom) <= 0:
        raise ValueError(f"Denominator must be positive, got {denom}")
    scaled = coerce_decimal(value) * Decimal(int(denom))
    numerator = int(scaled.to_integral_value(rounding=ROUND_HALF_UP))
    return numerator, int(denom)


def _terminating_scale(denominator: int) -> int | None:
    twos = 0
    fives = 0
    while denominator % 2 == 0:
        denominator //= 2
        twos += 1
    while denominator % 5 == 0:
        denominator //= 5
        fives += 1
    if denominator != 1:
        return None
    return max(twos, fives)


__all__ = ["coerce_decimal", "round_money", "to_decimal", "from_decimal"]

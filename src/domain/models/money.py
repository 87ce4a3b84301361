"""Exact fraction amounts as stored by GnuCash."""

from dataclasses import dataclass
from decimal import Decimal
from fractions import Fraction
from functools import total_ordering
from math import lcm

from src.domain.constants import DEFAULT_CURRENCY_DENOM
from src.utils.decimal_utils import from_decimal, to_decimal


@total_ordering
@dataclass(frozen=True, eq=False)
class Money:
    """Immutable ``num / denom`` amount.

    Arithmetic between amounts with different denominators happens on their
    least common multiple, so no precision is ever lost. Equality, ordering
    and hashing compare the represented value, not the raw pair.

    Attributes:
        num: Signed numerator.
        denom: Positive denominator (e.g. 100 for cents).
    """

    num: int
    denom: int = DEFAULT_CURRENCY_DENOM

    def __post_init__(self) -> None:
        if int(self.denom) <= 0:
            raise ValueError(
                f"Money denominator must be positive, got {self.denom}"
            )
        object.__setattr__(self, "num", int(self.num))
        object.__setattr__(self, "denom", int(self.denom))

    @classmethod
    def zero(cls, denom: int = DEFAULT_CURRENCY_DENOM) -> "Money":
        """Return a zero amount with the given denominator."""
        return cls(0, denom)

    @classmethod
    def from_decimal(
        cls,
        value,
        denom: int = DEFAULT_CURRENCY_DENOM,
    ) -> "Money":
        """Build an amount from a decimal value, rounding half away from zero.

        Args:
            value: Decimal, int, float or numeric string.
            denom: Target denominator.

        Returns:
            Money: Rounded amount.
        """
        num, resolved_denom = from_decimal(value, denom)
        return cls(num, resolved_denom)

    @classmethod
    def from_fraction(
        cls,
        value: Fraction,
        denom: int = DEFAULT_CURRENCY_DENOM,
    ) -> "Money":
        """Build an exact amount, widening ``denom`` when required.

        Args:
            value: Exact rational value.
            denom: Preferred denominator.

        Returns:
            Money: Amount whose denominator is ``denom`` or a multiple of it.
        """
        value = Fraction(value)
        common = lcm(int(denom), value.denominator)
        return cls(value.numerator * (common // value.denominator), common)

    def as_fraction(self) -> Fraction:
        """Return the exact rational value."""
        return Fraction(self.num, self.denom)

    def as_decimal(self) -> Decimal:
        """Return the value as a Decimal (exact for power-of-ten denominators)."""
        return Decimal(self.num) / Decimal(self.denom)

    def is_zero(self) -> bool:
        """Return True when the amount is exactly zero."""
        return self.num == 0

    def rescale(self, denom: int) -> "Money":
        """Express the same value over another denominator.

        Raises:
            ValueError: If the value is not representable over ``denom``.
        """
        scaled = self.as_fraction() * int(denom)
        if scaled.denominator != 1:
            raise ValueError(
                f"{self} cannot be represented with denominator {denom}"
            )
        return Money(scaled.numerator, denom)

    def to_decimal_string(self) -> str:
        """Return the GnuCash-style decimal string."""
        return to_decimal(self.num, self.denom)

    def _common(self, other: "Money") -> tuple[int, int, int]:
        common = lcm(self.denom, other.denom)
        return (
            self.num * (common // self.denom),
            other.num * (common // other.denom),
            common,
        )

    def __add__(self, other: "Money") -> "Money":
        if not isinstance(other, Money):
            return NotImplemented
        left, right, common = self._common(other)
        return Money(left + right, common)

    def __radd__(self, other) -> "Money":
        # sum() starts from the int 0
        if other == 0:
            return self
        return NotImplemented

    def __sub__(self, other: "Money") -> "Money":
        if not isinstance(other, Money):
            return NotImplemented
        left, right, common = self._common(other)
        return Money(left - right, common)

    def __neg__(self) -> "Money":
        return Money(-self.num, self.denom)

    def __abs__(self) -> "Money":
        return Money(abs(self.num), self.denom)

    def __eq__(self, other) -> bool:
        if isinstance(other, Money):
            return self.as_fraction() == other.as_fraction()
        if isinstance(other, int):
            return self.as_fraction() == other
        return NotImplemented

    def __lt__(self, other) -> bool:
        if isinstance(other, Money):
            return self.as_fraction() < other.as_fraction()
        if isinstance(other, int):
            return self.as_fraction() < other
        return NotImplemented

    def __hash__(self) -> int:
        return hash(self.as_fraction())

    def __str__(self) -> str:
        return self.to_decimal_string()


__all__ = ["Money"]

"""Rescaling between native token precision and canonical 18-decimal units."""

from __future__ import annotations

from ..core.constants import CANONICAL_DECIMALS, MAX_UINT256
from ..core.errors import InvalidAmount, PrecisionOverflow


def _scale_factor(decimals_a: int, decimals_b: int) -> int:
    exponent = abs(decimals_a - decimals_b)
    factor = 10**exponent
    if factor > MAX_UINT256:
        raise PrecisionOverflow(f"scale factor 10**{exponent} exceeds uint256")
    return factor


def _checked(value: int) -> int:
    if value > MAX_UINT256:
        raise PrecisionOverflow(f"rescaled amount {value} exceeds uint256")
    return value


class DecimalNormalizer:
    """Stateless fixed-point converter.

    Scaling up multiplies by a power of ten, scaling down divides and
    truncates toward zero, matching integer fixed-point semantics.
    """

    def __init__(self, canonical_decimals: int = CANONICAL_DECIMALS) -> None:
        if canonical_decimals < 0:
            raise InvalidAmount(f"negative canonical decimals: {canonical_decimals}")
        self.canonical_decimals = canonical_decimals

    def to_canonical(self, amount: int, native_decimals: int) -> int:
        self._validate(amount, native_decimals)
        factor = _scale_factor(native_decimals, self.canonical_decimals)
        if native_decimals <= self.canonical_decimals:
            return _checked(amount * factor)
        return amount // factor

    def from_canonical(self, amount: int, native_decimals: int) -> int:
        self._validate(amount, native_decimals)
        factor = _scale_factor(native_decimals, self.canonical_decimals)
        if native_decimals >= self.canonical_decimals:
            return _checked(amount * factor)
        return amount // factor

    @staticmethod
    def _validate(amount: int, decimals: int) -> None:
        if amount < 0:
            raise InvalidAmount(f"negative amount: {amount}")
        if decimals < 0:
            raise InvalidAmount(f"negative decimals: {decimals}")


__all__ = ["DecimalNormalizer"]

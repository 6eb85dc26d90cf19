"""Conservative lower bounds for pool conversions."""

from __future__ import annotations

from ..core.constants import DEFAULT_SLIPPAGE_BPS, HUNDRED_PERCENT_BPS
from ..core.errors import ConfigurationError


class SlippageGuard:
    """Apply one fixed slippage tolerance, in basis points, to ideal amounts."""

    def __init__(self, slippage_bps: int = DEFAULT_SLIPPAGE_BPS) -> None:
        if isinstance(slippage_bps, bool) or not isinstance(slippage_bps, int):
            raise ConfigurationError(f"slippage_bps must be an integer: {slippage_bps!r}")
        if not 0 <= slippage_bps <= HUNDRED_PERCENT_BPS:
            raise ConfigurationError(
                f"slippage_bps must be within [0, {HUNDRED_PERCENT_BPS}]: {slippage_bps}"
            )
        self._slippage_bps = slippage_bps

    @property
    def slippage_bps(self) -> int:
        return self._slippage_bps

    def min_acceptable(self, ideal_amount: int) -> int:
        """Return ``ideal_amount * (1 - slippage)`` truncated, never above the ideal."""

        return ideal_amount * (HUNDRED_PERCENT_BPS - self._slippage_bps) // HUNDRED_PERCENT_BPS

    def __repr__(self) -> str:
        return f"SlippageGuard(slippage_bps={self._slippage_bps})"


__all__ = ["SlippageGuard"]

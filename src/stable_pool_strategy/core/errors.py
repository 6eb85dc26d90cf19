"""Exception hierarchy raised by the strategy engine.

Every error derives from :class:`StrategyError` and from the closest builtin
exception, so callers may catch either the domain type or e.g. ``ValueError``.
"""

from __future__ import annotations


class StrategyError(Exception):
    """Base class for all strategy failures."""


class ConfigurationError(StrategyError, ValueError):
    """Strategy configured with an invalid asset set or slippage bound."""


class UnsupportedAsset(StrategyError, LookupError):
    """Asset identifier is not one of the three configured assets."""

    def __init__(self, asset: object) -> None:
        super().__init__(f"unsupported asset: {asset!r}")
        self.asset = asset


class InvalidAmount(StrategyError, ValueError):
    """Amount is zero, negative or otherwise malformed."""


class InvalidRecipient(StrategyError, ValueError):
    """Withdrawal destination is unset."""


class NothingToDeposit(StrategyError, ValueError):
    """Every deposit request carried a zero amount."""


class InsufficientShares(StrategyError, RuntimeError):
    """The strategy does not own enough pool shares system-wide.

    Signals an upstream accounting inconsistency; never expected in correct
    operation.
    """

    def __init__(self, required: int, available: int) -> None:
        super().__init__(f"insufficient shares: required {required}, available {available}")
        self.required = required
        self.available = available


class NoShares(StrategyError, RuntimeError):
    """The strategy owns no pool shares at all."""


class PrecisionOverflow(StrategyError, OverflowError):
    """Decimal rescaling exceeded the supported integer width."""


class InsufficientBalance(StrategyError, RuntimeError):
    """A token transfer or unstake exceeded the available balance."""


class SlippageExceeded(StrategyError, RuntimeError):
    """A pool conversion could not meet the requested minimum output."""

    def __init__(self, actual: int, minimum: int) -> None:
        super().__init__(f"slippage bound not met: got {actual}, minimum {minimum}")
        self.actual = actual
        self.minimum = minimum


__all__ = [
    "ConfigurationError",
    "InsufficientBalance",
    "InsufficientShares",
    "InvalidAmount",
    "InvalidRecipient",
    "NoShares",
    "NothingToDeposit",
    "PrecisionOverflow",
    "SlippageExceeded",
    "StrategyError",
    "UnsupportedAsset",
]

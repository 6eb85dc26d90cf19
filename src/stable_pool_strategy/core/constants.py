"""Core constants shared across stable_pool_strategy modules."""

from __future__ import annotations

# Pool shares and every cross-asset valuation use 18-decimal fixed point.
CANONICAL_DECIMALS = 18
CANONICAL_UNIT = 10**CANONICAL_DECIMALS

# The strategy always manages a three-coin pool.
N_COINS = 3

# Basis points denominator for the slippage bound (100 bps = 1%).
HUNDRED_PERCENT_BPS = 10_000
DEFAULT_SLIPPAGE_BPS = 100

# Widest integer the collaborating ledgers can represent.
MAX_UINT256 = 2**256 - 1

__all__ = [
    "CANONICAL_DECIMALS",
    "CANONICAL_UNIT",
    "DEFAULT_SLIPPAGE_BPS",
    "HUNDRED_PERCENT_BPS",
    "MAX_UINT256",
    "N_COINS",
]

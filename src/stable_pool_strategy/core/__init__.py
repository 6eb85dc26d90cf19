"""Core data structures for :mod:`stable_pool_strategy`.

This subpackage groups the models, errors and the asset map used across the
project so they can be shared without importing the strategy facade exposed
in :mod:`stable_pool_strategy.__init__`.
"""

from __future__ import annotations

from .assets import AssetIndexMap
from .constants import (
    CANONICAL_DECIMALS,
    CANONICAL_UNIT,
    DEFAULT_SLIPPAGE_BPS,
    HUNDRED_PERCENT_BPS,
    MAX_UINT256,
    N_COINS,
)
from .errors import (
    ConfigurationError,
    InsufficientBalance,
    InsufficientShares,
    InvalidAmount,
    InvalidRecipient,
    NoShares,
    NothingToDeposit,
    PrecisionOverflow,
    SlippageExceeded,
    StrategyError,
    UnsupportedAsset,
)
from .models import (
    DepositPlan,
    LedgerState,
    PoolSnapshot,
    StrategyEvent,
    SupportedAsset,
    WithdrawalPlan,
)
from .repositories import EventLog

__all__ = [
    "AssetIndexMap",
    "CANONICAL_DECIMALS",
    "CANONICAL_UNIT",
    "ConfigurationError",
    "DEFAULT_SLIPPAGE_BPS",
    "DepositPlan",
    "EventLog",
    "HUNDRED_PERCENT_BPS",
    "InsufficientBalance",
    "InsufficientShares",
    "InvalidAmount",
    "InvalidRecipient",
    "LedgerState",
    "MAX_UINT256",
    "N_COINS",
    "NoShares",
    "NothingToDeposit",
    "PoolSnapshot",
    "PrecisionOverflow",
    "SlippageExceeded",
    "StrategyError",
    "StrategyEvent",
    "SupportedAsset",
    "UnsupportedAsset",
    "WithdrawalPlan",
]

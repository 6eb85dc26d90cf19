"""
stable_pool_strategy: capital-allocation adapter for a three-coin stable pool.

Design goals:
- Accept any of three stablecoins from a vault, deposit into a shared pool
  and stake the resulting shares
- Withdraw a named asset by redeeming exactly the proportional share amount
- Bound every conversion with a single configured slippage tolerance
- Keep local and staked share balances reconciled, never double-counted
- Collaborators (pool, staking sink, token ledger) are plain protocols;
  in-memory venues ship for simulations.
"""

from __future__ import annotations

import logging

from . import accounting, config, reporting, venues
from .accounting import (
    BalanceOracle,
    DecimalNormalizer,
    DepositPlanner,
    ShareLedger,
    SlippageGuard,
    WithdrawalPlanner,
)
from .config import StrategyConfig, load_config
from .core import (
    AssetIndexMap,
    ConfigurationError,
    DepositPlan,
    EventLog,
    InsufficientBalance,
    InsufficientShares,
    InvalidAmount,
    InvalidRecipient,
    LedgerState,
    NoShares,
    NothingToDeposit,
    PoolSnapshot,
    PrecisionOverflow,
    SlippageExceeded,
    StrategyError,
    StrategyEvent,
    SupportedAsset,
    UnsupportedAsset,
    WithdrawalPlan,
)
from .simulation import Simulation, build_simulation
from .strategy import Strategy
from .venues import InMemoryPool, InMemoryStakingSink, InMemoryTokenLedger, Pool, StakingSink, TokenLedger

logger = logging.getLogger(__name__)

__all__ = [
    "AssetIndexMap",
    "BalanceOracle",
    "ConfigurationError",
    "DecimalNormalizer",
    "DepositPlan",
    "DepositPlanner",
    "EventLog",
    "InMemoryPool",
    "InMemoryStakingSink",
    "InMemoryTokenLedger",
    "InsufficientBalance",
    "InsufficientShares",
    "InvalidAmount",
    "InvalidRecipient",
    "LedgerState",
    "NoShares",
    "NothingToDeposit",
    "Pool",
    "PoolSnapshot",
    "PrecisionOverflow",
    "ShareLedger",
    "Simulation",
    "SlippageExceeded",
    "SlippageGuard",
    "StakingSink",
    "Strategy",
    "StrategyConfig",
    "StrategyError",
    "StrategyEvent",
    "SupportedAsset",
    "TokenLedger",
    "UnsupportedAsset",
    "WithdrawalPlan",
    "WithdrawalPlanner",
    "accounting",
    "build_simulation",
    "config",
    "load_config",
    "reporting",
    "venues",
]

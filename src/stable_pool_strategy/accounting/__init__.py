"""Accounting and conversion engine behind :class:`~stable_pool_strategy.Strategy`."""

from __future__ import annotations

from .decimals import DecimalNormalizer
from .deposit import DepositPlanner
from .ledger import ShareLedger
from .oracle import BalanceOracle
from .slippage import SlippageGuard
from .withdrawal import WithdrawalPlanner

__all__ = [
    "BalanceOracle",
    "DecimalNormalizer",
    "DepositPlanner",
    "ShareLedger",
    "SlippageGuard",
    "WithdrawalPlanner",
]

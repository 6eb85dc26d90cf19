"""Collaborator protocols and in-memory venues used by :mod:`stable_pool_strategy`."""

from __future__ import annotations

from .base import Checkpointable, Pool, StakingSink, TokenLedger
from .memory import InMemoryPool, InMemoryStakingSink, InMemoryTokenLedger

__all__ = [
    "Checkpointable",
    "InMemoryPool",
    "InMemoryStakingSink",
    "InMemoryTokenLedger",
    "Pool",
    "StakingSink",
    "TokenLedger",
]

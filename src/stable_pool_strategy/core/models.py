"""Immutable data models used throughout the strategy engine."""

from __future__ import annotations

from dataclasses import asdict, dataclass, field
from datetime import UTC, datetime
from typing import TYPE_CHECKING, Any

from .constants import N_COINS

if TYPE_CHECKING:  # pragma: no cover - imported only for type checking
    from ..venues.base import Pool, TokenLedger


@dataclass(frozen=True)
class SupportedAsset:
    """One of the three assets the strategy accepts, bound to a pool slot."""

    identifier: str
    decimals: int
    slot: int


@dataclass(frozen=True)
class PoolSnapshot:
    """Point-in-time read of the pool used for a single logical operation."""

    virtual_price: int  # 18-decimal value of one share
    reserves: tuple[int, ...]  # raw per-slot balances, native decimals
    share_total_supply: int

    @classmethod
    def capture(cls, pool: "Pool", tokens: "TokenLedger", share_token: str) -> "PoolSnapshot":
        """Read every field once, in one pass, from the live collaborators."""

        return cls(
            virtual_price=int(pool.virtual_price()),
            reserves=tuple(int(pool.reserve_balance(i)) for i in range(N_COINS)),
            share_total_supply=int(tokens.total_supply(share_token)),
        )


@dataclass(frozen=True)
class LedgerState:
    """Pool shares held locally versus deposited in the staking sink."""

    local_shares: int
    staked_shares: int

    @property
    def total(self) -> int:
        return self.local_shares + self.staked_shares

    def to_dict(self) -> dict[str, int]:
        return {
            "local_shares": self.local_shares,
            "staked_shares": self.staked_shares,
            "total": self.total,
        }


@dataclass(frozen=True)
class DepositPlan:
    """Per-slot deposit vector and the minimum shares the pool must mint."""

    amounts: tuple[int, ...]
    ideal_shares: int
    min_shares: int


@dataclass(frozen=True)
class WithdrawalPlan:
    """Share redemption required to pay out ``target_amount`` of ``asset``."""

    asset: SupportedAsset
    target_amount: int
    max_asset_amount: int
    shares_to_redeem: int
    shares_from_stake: int
    min_asset_out: int


@dataclass(frozen=True)
class StrategyEvent:
    """Record of a completed ledger-mutating operation."""

    sequence: int
    kind: str  # deposit, withdraw, withdraw_all, stake or unstake
    asset: str = ""
    amount: int = 0
    shares: int = 0
    recipient: str = ""
    timestamp: float = field(default_factory=lambda: datetime.now(tz=UTC).timestamp())

    def to_dict(self) -> dict[str, Any]:
        data = asdict(self)
        data["timestamp_iso"] = datetime.fromtimestamp(self.timestamp, tz=UTC).isoformat()
        return data


__all__ = [
    "DepositPlan",
    "LedgerState",
    "PoolSnapshot",
    "StrategyEvent",
    "SupportedAsset",
    "WithdrawalPlan",
]

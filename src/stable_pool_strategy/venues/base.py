"""Collaborator protocols consumed by the strategy engine."""

from __future__ import annotations

from collections.abc import Sequence
from typing import Any, Protocol, runtime_checkable


class Pool(Protocol):
    """Three-coin liquidity pool minting an 18-decimal share token."""

    def add_liquidity(self, amounts: Sequence[int], min_shares: int) -> int: ...

    def remove_liquidity_one_coin(self, shares: int, slot: int, min_out: int) -> int: ...

    def remove_liquidity(self, shares: int, min_amounts: Sequence[int]) -> list[int]: ...

    def calc_withdraw_one_coin(self, shares: int, slot: int) -> int: ...

    def virtual_price(self) -> int: ...

    def reserve_balance(self, slot: int) -> int: ...

    def coin_at(self, slot: int) -> str: ...


class StakingSink(Protocol):
    """Yield-bearing facility holding the strategy's idle pool shares."""

    def deposit_all_local_shares(self) -> None: ...

    def withdraw(self, amount: int) -> None: ...

    def staked_balance_of(self, account: str) -> int: ...


class TokenLedger(Protocol):
    """Balances and transfers for the pool coins and the share token."""

    def balance_of(self, token: str, account: str) -> int: ...

    def transfer(self, token: str, sender: str, recipient: str, amount: int) -> None: ...

    def total_supply(self, token: str) -> int: ...


@runtime_checkable
class Checkpointable(Protocol):
    """Collaborator whose state can be saved and rolled back."""

    def checkpoint(self) -> Any: ...

    def restore(self, state: Any) -> None: ...


__all__ = ["Checkpointable", "Pool", "StakingSink", "TokenLedger"]

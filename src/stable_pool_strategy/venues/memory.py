"""In-memory collaborators for simulations, demos and tests.

The pool prices every coin at par in canonical units and charges a flat fee
on single-coin and deposit conversions. It is not a stableswap invariant;
it only needs to behave like a pool at the interface the strategy uses.
Each collaborator acts on behalf of a single client ``account``.
"""

from __future__ import annotations

import logging
from collections import defaultdict
from collections.abc import Sequence

from ..accounting.decimals import DecimalNormalizer
from ..core.constants import CANONICAL_UNIT, HUNDRED_PERCENT_BPS, N_COINS
from ..core.errors import InsufficientBalance, InvalidAmount, SlippageExceeded

logger = logging.getLogger(__name__)


class InMemoryTokenLedger:
    """Balances for any number of tokens, keyed by ``(token, account)``."""

    def __init__(self) -> None:
        self._balances: defaultdict[tuple[str, str], int] = defaultdict(int)
        self._supply: defaultdict[str, int] = defaultdict(int)

    def balance_of(self, token: str, account: str) -> int:
        return self._balances.get((token, account), 0)

    def total_supply(self, token: str) -> int:
        return self._supply.get(token, 0)

    def mint(self, token: str, account: str, amount: int) -> None:
        if amount < 0:
            raise InvalidAmount(f"negative mint: {amount}")
        self._balances[(token, account)] += amount
        self._supply[token] += amount

    def burn(self, token: str, account: str, amount: int) -> None:
        if amount < 0:
            raise InvalidAmount(f"negative burn: {amount}")
        balance = self.balance_of(token, account)
        if balance < amount:
            raise InsufficientBalance(f"{account} holds {balance} {token}, burning {amount}")
        self._balances[(token, account)] = balance - amount
        self._supply[token] -= amount

    def transfer(self, token: str, sender: str, recipient: str, amount: int) -> None:
        if amount < 0:
            raise InvalidAmount(f"negative transfer: {amount}")
        balance = self.balance_of(token, sender)
        if balance < amount:
            raise InsufficientBalance(f"{sender} holds {balance} {token}, sending {amount}")
        self._balances[(token, sender)] = balance - amount
        self._balances[(token, recipient)] += amount

    def checkpoint(self) -> tuple[dict[tuple[str, str], int], dict[str, int]]:
        return dict(self._balances), dict(self._supply)

    def restore(self, state: tuple[dict[tuple[str, str], int], dict[str, int]]) -> None:
        balances, supply = state
        self._balances = defaultdict(int, balances)
        self._supply = defaultdict(int, supply)


class InMemoryPool:
    """Three-coin pool whose reserves and shares live in an :class:`InMemoryTokenLedger`."""

    def __init__(
        self,
        tokens: InMemoryTokenLedger,
        coins: Sequence[tuple[str, int]],
        *,
        share_token: str,
        account: str,
        address: str = "pool",
        fee_bps: int = 4,
    ) -> None:
        if len(coins) != N_COINS:
            raise InvalidAmount(f"pool needs {N_COINS} coins, got {len(coins)}")
        self._tokens = tokens
        self._coins = [str(c) for c, _ in coins]
        self._decimals = [int(d) for _, d in coins]
        self.share_token = share_token
        self.account = account
        self.address = address
        self.fee_bps = fee_bps
        self._normalizer = DecimalNormalizer()

    def coin_at(self, slot: int) -> str:
        return self._coins[slot]

    def reserve_balance(self, slot: int) -> int:
        return self._tokens.balance_of(self._coins[slot], self.address)

    def _canonical_reserves(self) -> int:
        return sum(
            self._normalizer.to_canonical(self.reserve_balance(i), self._decimals[i])
            for i in range(N_COINS)
        )

    def virtual_price(self) -> int:
        supply = self._tokens.total_supply(self.share_token)
        if supply == 0:
            return CANONICAL_UNIT
        return self._canonical_reserves() * CANONICAL_UNIT // supply

    def _after_fee(self, amount: int) -> int:
        return amount * (HUNDRED_PERCENT_BPS - self.fee_bps) // HUNDRED_PERCENT_BPS

    def add_liquidity(self, amounts: Sequence[int], min_shares: int) -> int:
        if len(amounts) != N_COINS or any(a < 0 for a in amounts):
            raise InvalidAmount(f"malformed deposit vector: {list(amounts)}")
        value = sum(
            self._normalizer.to_canonical(amounts[i], self._decimals[i]) for i in range(N_COINS)
        )
        if value == 0:
            raise InvalidAmount("deposit vector is empty")
        minted = self._after_fee(value * CANONICAL_UNIT // self.virtual_price())
        if minted < min_shares:
            raise SlippageExceeded(minted, min_shares)
        for i, amount in enumerate(amounts):
            if amount:
                self._tokens.transfer(self._coins[i], self.account, self.address, amount)
        self._tokens.mint(self.share_token, self.account, minted)
        logger.debug("Pool minted %s shares for %s", minted, list(amounts))
        return minted

    def calc_withdraw_one_coin(self, shares: int, slot: int) -> int:
        if shares <= 0:
            return 0
        value = shares * self.virtual_price() // CANONICAL_UNIT
        return self._after_fee(self._normalizer.from_canonical(value, self._decimals[slot]))

    def remove_liquidity_one_coin(self, shares: int, slot: int, min_out: int) -> int:
        amount = self.calc_withdraw_one_coin(shares, slot)
        if amount < min_out:
            raise SlippageExceeded(amount, min_out)
        self._tokens.burn(self.share_token, self.account, shares)
        self._tokens.transfer(self._coins[slot], self.address, self.account, amount)
        return amount

    def remove_liquidity(self, shares: int, min_amounts: Sequence[int]) -> list[int]:
        supply = self._tokens.total_supply(self.share_token)
        if shares <= 0 or supply == 0:
            raise InvalidAmount(f"cannot remove {shares} shares from supply {supply}")
        amounts = [self.reserve_balance(i) * shares // supply for i in range(N_COINS)]
        for amount, minimum in zip(amounts, min_amounts):
            if amount < minimum:
                raise SlippageExceeded(amount, minimum)
        self._tokens.burn(self.share_token, self.account, shares)
        for i, amount in enumerate(amounts):
            if amount:
                self._tokens.transfer(self._coins[i], self.address, self.account, amount)
        return amounts


class InMemoryStakingSink:
    """Holds staked shares in its own account and tracks each depositor's stake."""

    def __init__(
        self,
        tokens: InMemoryTokenLedger,
        *,
        share_token: str,
        account: str,
        address: str = "staking",
    ) -> None:
        self._tokens = tokens
        self.share_token = share_token
        self.account = account
        self.address = address
        self._staked: defaultdict[str, int] = defaultdict(int)

    def deposit_all_local_shares(self) -> None:
        amount = self._tokens.balance_of(self.share_token, self.account)
        if amount == 0:
            return
        self._tokens.transfer(self.share_token, self.account, self.address, amount)
        self._staked[self.account] += amount

    def withdraw(self, amount: int) -> None:
        staked = self._staked.get(self.account, 0)
        if amount < 0 or amount > staked:
            raise InsufficientBalance(f"{self.account} staked {staked}, withdrawing {amount}")
        self._staked[self.account] = staked - amount
        self._tokens.transfer(self.share_token, self.address, self.account, amount)

    def staked_balance_of(self, account: str) -> int:
        return self._staked.get(account, 0)

    def checkpoint(self) -> dict[str, int]:
        return dict(self._staked)

    def restore(self, state: dict[str, int]) -> None:
        self._staked = defaultdict(int, state)


__all__ = ["InMemoryPool", "InMemoryStakingSink", "InMemoryTokenLedger"]

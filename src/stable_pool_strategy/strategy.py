"""Strategy facade: deposit into the pool, stake shares, withdraw and report."""

from __future__ import annotations

import logging
import threading
from collections.abc import Iterable, Iterator, Sequence
from contextlib import contextmanager
from typing import Any

from .accounting import (
    BalanceOracle,
    DecimalNormalizer,
    DepositPlanner,
    ShareLedger,
    SlippageGuard,
    WithdrawalPlanner,
)
from .config import StrategyConfig
from .core import (
    AssetIndexMap,
    ConfigurationError,
    EventLog,
    InvalidAmount,
    LedgerState,
    PoolSnapshot,
    SlippageExceeded,
)
from .venues.base import Checkpointable, Pool, StakingSink, TokenLedger

logger = logging.getLogger(__name__)


def _apportion(total: int, weights: Sequence[int]) -> list[int]:
    """Split ``total`` pro rata to ``weights``; the remainder goes to the last non-zero weight."""

    weight_sum = sum(weights)
    if weight_sum == 0:
        return [0] * len(weights)
    parts = [total * w // weight_sum for w in weights]
    last = max(i for i, w in enumerate(weights) if w)
    parts[last] += total - sum(parts)
    return parts


class Strategy:
    """Allocate vault capital into a three-coin pool and stake the shares.

    Every public operation runs under an instance lock. Mutating operations
    also run inside an atomic section: collaborators exposing
    ``checkpoint()``/``restore()`` are rolled back if any step raises, so a
    failed deposit or withdrawal leaves no partial state behind.
    """

    def __init__(
        self,
        config: StrategyConfig,
        pool: Pool,
        sink: StakingSink,
        tokens: TokenLedger,
        *,
        verify_pool: bool = True,
    ) -> None:
        if not config.address:
            raise ConfigurationError("strategy address is unset")
        if not config.vault:
            raise ConfigurationError("vault address is unset")
        if not config.share_token:
            raise ConfigurationError("share token is unset")

        self.config = config
        self.assets = AssetIndexMap(config.assets)
        if verify_pool:
            self.assets.verify_against(pool)

        self.normalizer = DecimalNormalizer()
        self.guard = SlippageGuard(config.slippage_bps)
        self.ledger = ShareLedger(
            tokens, sink, share_token=config.share_token, account=config.address
        )
        self.deposit_planner = DepositPlanner(self.assets, self.guard, self.normalizer)
        self.withdrawal_planner = WithdrawalPlanner(self.assets, self.guard, self.normalizer)
        self.oracle = BalanceOracle(self.assets, self.normalizer)
        self.events = EventLog()

        self._pool = pool
        self._sink = sink
        self._tokens = tokens
        self._lock = threading.RLock()

    @property
    def address(self) -> str:
        return self.config.address

    @property
    def vault(self) -> str:
        return self.config.vault

    # -----------------
    # Internals
    # -----------------

    def _checkpointables(self) -> list[Checkpointable]:
        seen: set[int] = set()
        found: list[Checkpointable] = []
        for collaborator in (self._tokens, self._sink, self._pool):
            if id(collaborator) in seen or not isinstance(collaborator, Checkpointable):
                continue
            seen.add(id(collaborator))
            found.append(collaborator)
        return found

    @contextmanager
    def _atomic(self, operation: str) -> Iterator[None]:
        with self._lock:
            saved: list[tuple[Checkpointable, Any]] = [
                (c, c.checkpoint()) for c in self._checkpointables()
            ]
            event_count = len(self.events)
            try:
                yield
            except Exception as exc:
                for collaborator, state in reversed(saved):
                    collaborator.restore(state)
                self.events.truncate(event_count)
                logger.warning("%s failed, state rolled back: %s", operation, exc)
                raise

    def _snapshot(self) -> PoolSnapshot:
        return PoolSnapshot.capture(self._pool, self._tokens, self.config.share_token)

    def _deposit(self, requests: Iterable[tuple[str, int]]) -> int:
        snapshot = self._snapshot()
        plan = self.deposit_planner.plan(requests, snapshot)
        minted = int(self._pool.add_liquidity(list(plan.amounts), plan.min_shares))

        weights = [
            self.normalizer.to_canonical(amount, self.assets.asset_at(slot).decimals)
            for slot, amount in enumerate(plan.amounts)
        ]
        for slot, shares in enumerate(_apportion(minted, weights)):
            if plan.amounts[slot]:
                self.events.record(
                    "deposit",
                    asset=self.assets.asset_at(slot).identifier,
                    amount=plan.amounts[slot],
                    shares=shares,
                )

        staked = self.ledger.stake_all_local()
        if staked:
            self.events.record("stake", shares=staked)
        logger.info("Deposited %s, minted %s shares (min %s)", plan.amounts, minted, plan.min_shares)
        return minted

    def _release(self, shares: int) -> None:
        released = self.ledger.ensure_available(shares)
        if released:
            self.events.record("unstake", shares=released)

    # -----------------
    # Mutating operations
    # -----------------

    def deposit(self, asset: str, amount: int) -> int:
        """Convert ``amount`` of ``asset`` held by the strategy into staked pool shares.

        Returns the number of shares minted.
        """

        if isinstance(amount, bool) or not isinstance(amount, int) or amount <= 0:
            raise InvalidAmount(f"deposit amount must be a positive integer: {amount!r}")
        self.assets.get(asset)
        with self._atomic("deposit"):
            return self._deposit([(asset, amount)])

    def deposit_all(self) -> int:
        """Deposit the strategy's entire idle balance of every supported asset."""

        with self._atomic("deposit_all"):
            requests = [
                (a.identifier, int(self._tokens.balance_of(a.identifier, self.address)))
                for a in self.assets
            ]
            return self._deposit(requests)

    def withdraw(self, recipient: str, asset: str, amount: int) -> int:
        """Redeem enough shares to pay exactly ``amount`` of ``asset`` to ``recipient``.

        Anything the pool returns above ``amount`` is forwarded to the vault.
        A redemption that returns less than ``amount`` raises
        :class:`SlippageExceeded` and the whole operation is rolled back.
        Returns the amount transferred to ``recipient``.
        """

        with self._atomic("withdraw"):
            totals = self.ledger.totals()
            plan = self.withdrawal_planner.plan(
                asset, amount, totals, self._pool, recipient=recipient
            )
            self._release(plan.shares_to_redeem)
            received = int(
                self._pool.remove_liquidity_one_coin(
                    plan.shares_to_redeem, plan.asset.slot, plan.min_asset_out
                )
            )
            if received < amount:
                logger.warning(
                    "Redemption of %s shares returned %s %s, below target %s",
                    plan.shares_to_redeem,
                    received,
                    asset,
                    amount,
                )
                raise SlippageExceeded(received, amount)

            self._tokens.transfer(asset, self.address, recipient, amount)
            dust = received - amount
            if dust:
                self._tokens.transfer(asset, self.address, self.vault, dust)
                logger.debug("Forwarded %s %s dust to vault", dust, asset)

            self.events.record(
                "withdraw",
                asset=asset,
                amount=amount,
                shares=plan.shares_to_redeem,
                recipient=recipient,
            )
            logger.info(
                "Withdrew %s %s to %s by redeeming %s shares",
                amount,
                asset,
                recipient,
                plan.shares_to_redeem,
            )
            return amount

    def withdraw_all(self) -> dict[str, int]:
        """Exit the pool completely and forward every asset balance to the vault.

        Returns the amount of each asset forwarded.
        """

        with self._atomic("withdraw_all"):
            totals = self.ledger.totals()
            if totals.total:
                snapshot = self._snapshot()
                supply = snapshot.share_total_supply
                min_amounts = [
                    self.guard.min_acceptable(totals.total * reserve // supply) if supply else 0
                    for reserve in snapshot.reserves
                ]
                self._release(totals.total)
                self._pool.remove_liquidity(totals.total, min_amounts)
            else:
                logger.info("withdraw_all with no shares; forwarding idle balances only")

            forwarded: dict[str, int] = {}
            for a in self.assets:
                balance = int(self._tokens.balance_of(a.identifier, self.address))
                if balance:
                    self._tokens.transfer(a.identifier, self.address, self.vault, balance)
                forwarded[a.identifier] = balance

            weights = [
                self.normalizer.to_canonical(forwarded[a.identifier], a.decimals)
                for a in self.assets
            ]
            for a, shares in zip(self.assets, _apportion(totals.total, weights)):
                if forwarded[a.identifier]:
                    self.events.record(
                        "withdraw_all",
                        asset=a.identifier,
                        amount=forwarded[a.identifier],
                        shares=shares,
                        recipient=self.vault,
                    )
            logger.info("Withdrew all %s shares, forwarded %s", totals.total, forwarded)
            return forwarded

    # -----------------
    # Read-only operations
    # -----------------

    def check_balance(self, asset: str) -> int:
        """Proportional claim on ``asset`` reserves, in its native decimals."""

        slot_asset = self.assets.get(asset)
        totals, snapshot = self.position()
        return self.oracle.value_of(slot_asset.identifier, totals, snapshot)

    def holdings(self) -> dict[str, int]:
        return self.oracle.value_all(*self.position())

    def position(self) -> tuple[LedgerState, PoolSnapshot]:
        """Share totals and pool snapshot read together under the instance lock."""

        with self._lock:
            return self.ledger.totals(), self._snapshot()

    def supports_asset(self, asset: object) -> bool:
        return self.assets.is_supported(asset)

    def ledger_state(self) -> LedgerState:
        with self._lock:
            return self.ledger.totals()

    def snapshot(self) -> PoolSnapshot:
        return self._snapshot()


__all__ = ["Strategy"]

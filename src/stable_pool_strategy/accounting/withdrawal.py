"""Withdrawal planning: how many shares to burn for a target asset amount."""

from __future__ import annotations

import logging

from ..core.assets import AssetIndexMap
from ..core.errors import InsufficientShares, InvalidAmount, InvalidRecipient, NoShares
from ..core.models import LedgerState, WithdrawalPlan
from ..venues.base import Pool
from .decimals import DecimalNormalizer
from .slippage import SlippageGuard

logger = logging.getLogger(__name__)


class WithdrawalPlanner:
    """Size a single-asset redemption proportionally to the whole position."""

    def __init__(
        self,
        assets: AssetIndexMap,
        guard: SlippageGuard,
        normalizer: DecimalNormalizer | None = None,
    ) -> None:
        self._assets = assets
        self._guard = guard
        self._normalizer = normalizer or DecimalNormalizer()

    def plan(
        self,
        asset: str,
        target_amount: int,
        totals: LedgerState,
        pool: Pool,
        *,
        recipient: str | None,
    ) -> WithdrawalPlan:
        """Compute the redemption needed to pay ``target_amount`` of ``asset``.

        The pool is quoted once for the amount of ``asset`` obtainable by
        redeeming every owned share; the target is then scaled against that
        quote with a single multiply-then-divide. Shares above the locally
        held balance must be released from the staking sink first.

        Parameters
        ----------
        asset:
            Identifier of one of the configured assets.
        target_amount:
            Amount of ``asset`` to withdraw, in its native decimals.
        totals:
            Ledger state read once for this operation.
        pool:
            Pool answering ``calc_withdraw_one_coin``.
        recipient:
            Destination account; must be set.
        """

        if isinstance(target_amount, bool) or not isinstance(target_amount, int):
            raise InvalidAmount(f"withdrawal amount must be an integer: {target_amount!r}")
        if target_amount <= 0:
            raise InvalidAmount(f"withdrawal amount must be positive: {target_amount}")
        if not recipient:
            raise InvalidRecipient("withdrawal recipient is unset")
        supported = self._assets.get(asset)
        if totals.total == 0:
            raise NoShares("strategy holds no pool shares")

        max_asset_amount = int(pool.calc_withdraw_one_coin(totals.total, supported.slot))
        if max_asset_amount <= 0:
            raise InvalidAmount(f"pool quotes no {asset} for {totals.total} shares")

        shares_to_redeem = totals.total * target_amount // max_asset_amount
        if shares_to_redeem > totals.total:
            raise InsufficientShares(shares_to_redeem, totals.total)
        if shares_to_redeem == 0:
            raise InvalidAmount(f"withdrawal of {target_amount} {asset} rounds to zero shares")

        shares_from_stake = max(0, shares_to_redeem - totals.local_shares)
        min_asset_out = self._guard.min_acceptable(
            self._normalizer.from_canonical(shares_to_redeem, supported.decimals)
        )

        plan = WithdrawalPlan(
            asset=supported,
            target_amount=target_amount,
            max_asset_amount=max_asset_amount,
            shares_to_redeem=shares_to_redeem,
            shares_from_stake=shares_from_stake,
            min_asset_out=min_asset_out,
        )
        logger.debug(
            "Withdrawal plan %s %s: redeem=%s from_stake=%s min_out=%s",
            target_amount,
            asset,
            shares_to_redeem,
            shares_from_stake,
            min_asset_out,
        )
        return plan


__all__ = ["WithdrawalPlanner"]

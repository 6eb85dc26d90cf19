"""Deposit planning: per-slot amounts and the minimum acceptable mint."""

from __future__ import annotations

import logging
from collections.abc import Iterable

from ..core.assets import AssetIndexMap
from ..core.constants import CANONICAL_UNIT, N_COINS
from ..core.errors import InvalidAmount, NothingToDeposit
from ..core.models import DepositPlan, PoolSnapshot
from .decimals import DecimalNormalizer
from .slippage import SlippageGuard

logger = logging.getLogger(__name__)


class DepositPlanner:
    """Turn ``(asset, amount)`` requests into a pool deposit vector."""

    def __init__(
        self,
        assets: AssetIndexMap,
        guard: SlippageGuard,
        normalizer: DecimalNormalizer | None = None,
    ) -> None:
        self._assets = assets
        self._guard = guard
        self._normalizer = normalizer or DecimalNormalizer()

    def plan(self, requests: Iterable[tuple[str, int]], snapshot: PoolSnapshot) -> DepositPlan:
        """Build the deposit vector for ``requests`` against one pool snapshot.

        Zero amounts are skipped. Repeated assets are summed into their slot.
        The ideal share count values each request at the snapshot's virtual
        price, and ``min_shares`` is that ideal less the slippage tolerance.
        """

        amounts = [0] * N_COINS
        ideal_shares = 0
        for identifier, amount in requests:
            asset = self._assets.get(identifier)
            if amount < 0:
                raise InvalidAmount(f"negative deposit amount for {identifier}: {amount}")
            if amount == 0:
                continue
            if snapshot.virtual_price <= 0:
                raise InvalidAmount(f"pool virtual price is not positive: {snapshot.virtual_price}")
            canonical = self._normalizer.to_canonical(amount, asset.decimals)
            ideal_shares += canonical * CANONICAL_UNIT // snapshot.virtual_price
            amounts[asset.slot] += amount

        if not any(amounts):
            raise NothingToDeposit("no non-zero deposit requests")

        plan = DepositPlan(
            amounts=tuple(amounts),
            ideal_shares=ideal_shares,
            min_shares=self._guard.min_acceptable(ideal_shares),
        )
        logger.debug(
            "Deposit plan amounts=%s ideal_shares=%s min_shares=%s",
            plan.amounts,
            plan.ideal_shares,
            plan.min_shares,
        )
        return plan


__all__ = ["DepositPlanner"]

"""Point-in-time valuation of the strategy's claim on pool reserves."""

from __future__ import annotations

from ..core.assets import AssetIndexMap
from ..core.models import LedgerState, PoolSnapshot
from .decimals import DecimalNormalizer


class BalanceOracle:
    """Value owned shares against a pool snapshot.

    The result is the strategy's proportional claim on each reserve. It is an
    estimate for reporting and is not what a single-asset redemption of the
    same nominal amount would yield.
    """

    def __init__(self, assets: AssetIndexMap, normalizer: DecimalNormalizer | None = None) -> None:
        self._assets = assets
        self._normalizer = normalizer or DecimalNormalizer()

    def value_of(self, asset: str, totals: LedgerState, snapshot: PoolSnapshot) -> int:
        slot = self._assets.index_of(asset)
        if snapshot.share_total_supply == 0:
            return 0
        return totals.total * snapshot.reserves[slot] // snapshot.share_total_supply

    def value_all(self, totals: LedgerState, snapshot: PoolSnapshot) -> dict[str, int]:
        return {
            asset.identifier: self.value_of(asset.identifier, totals, snapshot)
            for asset in self._assets
        }

    def canonical_value(self, totals: LedgerState, snapshot: PoolSnapshot) -> int:
        """Sum of the three claims in 18-decimal units."""

        return sum(
            self._normalizer.to_canonical(
                self.value_of(asset.identifier, totals, snapshot), asset.decimals
            )
            for asset in self._assets
        )


__all__ = ["BalanceOracle"]

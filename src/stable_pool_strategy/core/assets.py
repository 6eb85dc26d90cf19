"""Fixed mapping between the strategy's assets and pool coin slots."""

from __future__ import annotations

from collections.abc import Iterable, Iterator
from typing import TYPE_CHECKING

from .constants import N_COINS
from .errors import ConfigurationError, UnsupportedAsset
from .models import SupportedAsset

if TYPE_CHECKING:  # pragma: no cover - imported only for type checking
    from ..venues.base import Pool


class AssetIndexMap:
    """Bijection between exactly three asset identifiers and slots ``0..2``."""

    def __init__(self, assets: Iterable[SupportedAsset]) -> None:
        ordered = sorted(assets, key=lambda a: a.slot)
        if len(ordered) != N_COINS:
            raise ConfigurationError(f"expected {N_COINS} assets, got {len(ordered)}")
        if [a.slot for a in ordered] != list(range(N_COINS)):
            raise ConfigurationError(
                f"asset slots must be a permutation of 0..{N_COINS - 1}: "
                f"{[a.slot for a in ordered]}"
            )
        by_id = {a.identifier: a for a in ordered}
        if len(by_id) != N_COINS:
            raise ConfigurationError("asset identifiers must be unique")
        for asset in ordered:
            if asset.decimals < 0:
                raise ConfigurationError(f"negative decimals for {asset.identifier}")
        self._by_slot: tuple[SupportedAsset, ...] = tuple(ordered)
        self._by_id: dict[str, SupportedAsset] = by_id

    def index_of(self, asset: str) -> int:
        return self.get(asset).slot

    def get(self, asset: str) -> SupportedAsset:
        try:
            return self._by_id[asset]
        except (KeyError, TypeError):
            raise UnsupportedAsset(asset) from None

    def is_supported(self, asset: object) -> bool:
        try:
            return asset in self._by_id
        except TypeError:
            return False

    def decimals_of(self, asset: str) -> int:
        return self.get(asset).decimals

    def asset_at(self, slot: int) -> SupportedAsset:
        if not 0 <= slot < N_COINS:
            raise IndexError(f"slot out of range: {slot}")
        return self._by_slot[slot]

    def verify_against(self, pool: "Pool") -> None:
        """Check that the pool lists each asset at its configured slot."""

        for asset in self._by_slot:
            coin = pool.coin_at(asset.slot)
            if coin != asset.identifier:
                raise ConfigurationError(
                    f"pool slot {asset.slot} holds {coin!r}, expected {asset.identifier!r}"
                )

    @property
    def identifiers(self) -> list[str]:
        return [a.identifier for a in self._by_slot]

    def __len__(self) -> int:
        return len(self._by_slot)

    def __iter__(self) -> Iterator[SupportedAsset]:
        return iter(self._by_slot)


__all__ = ["AssetIndexMap"]

"""Wire a :class:`Strategy` to in-memory venues for demos and tests."""

from __future__ import annotations

from dataclasses import dataclass

from .config import StrategyConfig
from .strategy import Strategy
from .venues import InMemoryPool, InMemoryStakingSink, InMemoryTokenLedger


@dataclass
class Simulation:
    """A strategy together with the in-memory collaborators it talks to."""

    strategy: Strategy
    tokens: InMemoryTokenLedger
    pool: InMemoryPool
    sink: InMemoryStakingSink

    def fund(self, asset: str, amount: int) -> None:
        """Credit the strategy with ``amount`` of ``asset``, as a vault transfer would."""

        self.tokens.mint(asset, self.strategy.address, amount)

    def seed_pool(self, amounts: dict[str, int], provider: str = "seed") -> None:
        """Give the pool third-party liquidity so the strategy is not its only LP."""

        lp_pool = InMemoryPool(
            self.tokens,
            [(a.identifier, a.decimals) for a in self.strategy.assets],
            share_token=self.strategy.config.share_token,
            account=provider,
            address=self.pool.address,
            fee_bps=self.pool.fee_bps,
        )
        vector = []
        for a in self.strategy.assets:
            amount = amounts.get(a.identifier, 0)
            self.tokens.mint(a.identifier, provider, amount)
            vector.append(amount)
        lp_pool.add_liquidity(vector, 0)


def build_simulation(config: StrategyConfig, *, fee_bps: int = 4) -> Simulation:
    tokens = InMemoryTokenLedger()
    coins = [(a.identifier, a.decimals) for a in sorted(config.assets, key=lambda a: a.slot)]
    pool = InMemoryPool(
        tokens,
        coins,
        share_token=config.share_token,
        account=config.address,
        fee_bps=fee_bps,
    )
    sink = InMemoryStakingSink(tokens, share_token=config.share_token, account=config.address)
    strategy = Strategy(config, pool, sink, tokens)
    return Simulation(strategy=strategy, tokens=tokens, pool=pool, sink=sink)


__all__ = ["Simulation", "build_simulation"]

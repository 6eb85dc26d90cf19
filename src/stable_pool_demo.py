from __future__ import annotations

import logging
import os
import sys

import pandas as pd

from stable_pool_strategy import StrategyConfig, StrategyError, build_simulation, load_config
from stable_pool_strategy.config import apply_env_overrides
from stable_pool_strategy.reporting import holdings_frame, ledger_frame, write_report


logger = logging.getLogger(__name__)


def main() -> None:
    """Run a deposit / withdraw / withdraw-all cycle against in-memory venues."""
    logging.basicConfig(level=logging.INFO, format="%(levelname)s %(name)s: %(message)s")

    cfg_file = os.getenv("STABLE_POOL_CONFIG") or (sys.argv[1] if len(sys.argv) > 1 else None)
    cfg = apply_env_overrides(load_config(cfg_file))
    strategy_cfg = StrategyConfig.from_mapping(cfg)

    sim = build_simulation(strategy_cfg, fee_bps=int(cfg.get("pool", {}).get("fee_bps", 0)))
    strategy = sim.strategy

    scale = {a.identifier: 10**a.decimals for a in strategy.assets}
    sim.seed_pool({asset: 1_000_000 * unit for asset, unit in scale.items()})

    try:
        for asset, unit in scale.items():
            sim.fund(asset, 10_000 * unit)
            strategy.deposit(asset, 10_000 * unit)

        first = strategy.assets.asset_at(0).identifier
        strategy.withdraw("alice", first, 2_500 * scale[first])

        with pd.option_context("display.width", 120):
            print(ledger_frame(strategy).to_string(index=False))
            print(holdings_frame(strategy).to_string(index=False))

        outdir = cfg.get("output", {}).get("outdir")
        if outdir:
            write_report(strategy, outdir)

        forwarded = strategy.withdraw_all()
        print(f"Forwarded to vault: {forwarded}")
    except StrategyError as exc:
        logger.error("Demo aborted: %s", exc)
        raise SystemExit(1) from exc

    print(strategy.events.to_dataframe().to_string(index=False))


if __name__ == "__main__":
    main()

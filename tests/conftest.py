import sys
from pathlib import Path

import pytest


# Ensure the package is importable without installation when running tests locally
pkg_src = Path(__file__).resolve().parents[1] / "src"
if str(pkg_src) not in sys.path:
    sys.path.insert(0, str(pkg_src))

from stable_pool_strategy import (  # noqa: E402
    AssetIndexMap,
    Simulation,
    StrategyConfig,
    SupportedAsset,
    build_simulation,
)

DAI_UNIT = 10**18
USDC_UNIT = 10**6
USDT_UNIT = 10**6


@pytest.fixture
def supported_assets() -> tuple[SupportedAsset, ...]:
    return (
        SupportedAsset("DAI", 18, 0),
        SupportedAsset("USDC", 6, 1),
        SupportedAsset("USDT", 6, 2),
    )


@pytest.fixture
def asset_map(supported_assets: tuple[SupportedAsset, ...]) -> AssetIndexMap:
    return AssetIndexMap(supported_assets)


@pytest.fixture
def strategy_config(supported_assets: tuple[SupportedAsset, ...]) -> StrategyConfig:
    return StrategyConfig(
        address="strategy",
        vault="vault",
        share_token="3CRV",
        assets=supported_assets,
        slippage_bps=100,
    )


@pytest.fixture
def sim(strategy_config: StrategyConfig) -> Simulation:
    """Fee-free pool so share and asset amounts stay exact."""

    return build_simulation(strategy_config, fee_bps=0)


@pytest.fixture
def fee_sim(strategy_config: StrategyConfig) -> Simulation:
    """Pool charging 4 bps with third-party liquidity already in it."""

    s = build_simulation(strategy_config, fee_bps=4)
    s.seed_pool({"DAI": 1_000_000 * DAI_UNIT, "USDC": 1_000_000 * USDC_UNIT, "USDT": 1_000_000 * USDT_UNIT})
    return s

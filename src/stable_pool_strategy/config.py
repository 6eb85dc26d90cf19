"""Strategy configuration loaded from TOML with built-in defaults."""

from __future__ import annotations

import copy
import logging
import os
import tomllib
from collections.abc import Mapping
from dataclasses import dataclass
from pathlib import Path
from typing import Any, cast

from .core.constants import DEFAULT_SLIPPAGE_BPS
from .core.errors import ConfigurationError
from .core.models import SupportedAsset

logger = logging.getLogger(__name__)

DEFAULTS: dict[str, Any] = {
    "strategy": {
        "address": "strategy",
        "vault": "vault",
        "share_token": "3CRV",
        "slippage_bps": DEFAULT_SLIPPAGE_BPS,
    },
    "assets": [
        {"identifier": "DAI", "decimals": 18, "slot": 0},
        {"identifier": "USDC", "decimals": 6, "slot": 1},
        {"identifier": "USDT", "decimals": 6, "slot": 2},
    ],
    "pool": {"fee_bps": 0},
    "output": {"outdir": None},
}


@dataclass(frozen=True)
class StrategyConfig:
    """Immutable settings fixed when a strategy instance is constructed."""

    address: str
    vault: str
    share_token: str
    assets: tuple[SupportedAsset, ...]
    slippage_bps: int = DEFAULT_SLIPPAGE_BPS

    @classmethod
    def from_mapping(cls, cfg: Mapping[str, Any]) -> "StrategyConfig":
        section = cfg.get("strategy", {})
        try:
            assets = tuple(
                SupportedAsset(
                    identifier=str(item["identifier"]),
                    decimals=int(item["decimals"]),
                    slot=int(item["slot"]),
                )
                for item in cfg.get("assets", [])
            )
            slippage_bps = int(section.get("slippage_bps", DEFAULT_SLIPPAGE_BPS))
        except (KeyError, TypeError, ValueError) as exc:
            raise ConfigurationError(f"malformed strategy configuration: {exc}") from exc
        return cls(
            address=str(section.get("address", "")),
            vault=str(section.get("vault", "")),
            share_token=str(section.get("share_token", "")),
            assets=assets,
            slippage_bps=slippage_bps,
        )


def load_config(path: str | Path | None) -> dict[str, Any]:
    """Load configuration from a TOML file and merge with defaults.

    Parameters
    ----------
    path:
        Optional path to a configuration file. When ``None`` or missing, the
        built-in defaults are used.

    Returns
    -------
    dict[str, Any]
        Configuration dictionary with any file overrides applied. Tables
        merge key by key; the ``assets`` array replaces the default list.
    """

    cfg = copy.deepcopy(DEFAULTS)
    cfg_path = Path(path) if path else None

    if cfg_path and cfg_path.is_file():
        with open(cfg_path, "rb") as f:
            file_cfg = tomllib.load(f)
        for k, v in file_cfg.items():
            if isinstance(v, dict) and k in cfg and isinstance(cfg[k], dict):
                cast(dict, cfg[k]).update(v)
            else:
                cfg[k] = v
    elif cfg_path:
        logger.warning("Config file not found at %s. Using defaults.", cfg_path)

    return cfg


def apply_env_overrides(cfg: dict[str, Any], environ: Mapping[str, str] | None = None) -> dict[str, Any]:
    """Apply ``STABLE_POOL_*`` environment overrides in place."""

    env = os.environ if environ is None else environ
    if slippage_env := env.get("STABLE_POOL_SLIPPAGE_BPS"):
        try:
            cfg.setdefault("strategy", {})["slippage_bps"] = int(slippage_env)
        except ValueError:
            logger.warning("Ignoring non-integer STABLE_POOL_SLIPPAGE_BPS=%r", slippage_env)
    if outdir_env := env.get("STABLE_POOL_OUTDIR"):
        cfg.setdefault("output", {})["outdir"] = outdir_env
    return cfg


__all__ = ["DEFAULTS", "StrategyConfig", "apply_env_overrides", "load_config"]

"""Tabular reports of strategy holdings and activity."""

from __future__ import annotations

import logging
from pathlib import Path

import pandas as pd

from .strategy import Strategy

logger = logging.getLogger(__name__)

_HOLDINGS_COLUMNS = ["asset", "slot", "decimals", "value", "value_canonical", "weight"]


def _ensure_outdir(outdir: str | Path) -> Path:
    p = Path(outdir)
    p.mkdir(parents=True, exist_ok=True)
    return p


def holdings_frame(strategy: Strategy) -> pd.DataFrame:
    """Per-asset claim on pool reserves from a single snapshot.

    ``value`` is in native decimals; ``value_canonical`` in 18-decimal units
    and ``weight`` its share of the summed canonical value (NaN when empty).
    """

    totals, snapshot = strategy.position()
    rows = []
    for asset in strategy.assets:
        value = strategy.oracle.value_of(asset.identifier, totals, snapshot)
        rows.append(
            {
                "asset": asset.identifier,
                "slot": asset.slot,
                "decimals": asset.decimals,
                "value": value,
                "value_canonical": strategy.normalizer.to_canonical(value, asset.decimals),
            }
        )
    df = pd.DataFrame(rows, columns=_HOLDINGS_COLUMNS[:-1], dtype=object)
    total = sum(int(v) for v in df["value_canonical"])
    df["weight"] = [int(v) / total if total else float("nan") for v in df["value_canonical"]]
    return df


def ledger_frame(strategy: Strategy) -> pd.DataFrame:
    """Single-row frame of local, staked and total shares."""

    return pd.DataFrame([strategy.ledger_state().to_dict()], dtype=object)


def write_report(strategy: Strategy, outdir: str | Path) -> dict[str, Path]:
    """Write holdings, ledger and event CSVs into ``outdir``."""

    out = _ensure_outdir(outdir)
    paths = {
        "holdings": out / "holdings.csv",
        "ledger": out / "ledger.csv",
        "events": out / "events.csv",
    }
    holdings_frame(strategy).to_csv(paths["holdings"], index=False)
    ledger_frame(strategy).to_csv(paths["ledger"], index=False)
    strategy.events.to_dataframe().to_csv(paths["events"], index=False)
    logger.info("Wrote strategy report to %s", out)
    return paths


__all__ = ["holdings_frame", "ledger_frame", "write_report"]

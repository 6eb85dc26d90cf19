from __future__ import annotations

import threading
from collections.abc import Sequence

import pytest

from stable_pool_strategy import (
    ConfigurationError,
    InsufficientBalance,
    InvalidAmount,
    InvalidRecipient,
    LedgerState,
    NoShares,
    NothingToDeposit,
    Simulation,
    SlippageExceeded,
    Strategy,
    StrategyConfig,
    UnsupportedAsset,
    build_simulation,
)
from stable_pool_strategy.venues import InMemoryPool

from conftest import DAI_UNIT, USDC_UNIT, USDT_UNIT


def _kinds(strategy: Strategy) -> list[str]:
    return [e.kind for e in strategy.events]


def test_deposit_stakes_every_minted_share(sim: Simulation) -> None:
    sim.fund("USDC", 1_000 * USDC_UNIT)

    minted = sim.strategy.deposit("USDC", 1_000 * USDC_UNIT)

    assert minted == 1_000 * DAI_UNIT
    assert sim.strategy.ledger_state() == LedgerState(local_shares=0, staked_shares=minted)
    assert sim.tokens.balance_of("USDC", "strategy") == 0
    assert _kinds(sim.strategy) == ["deposit", "stake"]


@pytest.mark.parametrize(
    ("asset", "amount", "error"),
    [
        ("USDC", 0, InvalidAmount),
        ("USDC", -1, InvalidAmount),
        ("USDC", 1.5, InvalidAmount),
        ("FRAX", 10, UnsupportedAsset),
    ],
)
def test_deposit_rejects_bad_requests(sim: Simulation, asset: str, amount: int, error: type) -> None:
    with pytest.raises(error):
        sim.strategy.deposit(asset, amount)
    assert sim.strategy.ledger_state().total == 0
    assert len(sim.strategy.events) == 0


def test_failed_deposit_leaves_no_partial_state(sim: Simulation) -> None:
    sim.fund("DAI", 5 * DAI_UNIT)

    # strategy holds 5 DAI but asks the pool for 6
    with pytest.raises(InsufficientBalance):
        sim.strategy.deposit("DAI", 6 * DAI_UNIT)

    assert sim.tokens.balance_of("DAI", "strategy") == 5 * DAI_UNIT
    assert sim.tokens.total_supply("3CRV") == 0
    assert len(sim.strategy.events) == 0


def test_pool_fee_above_tolerance_aborts_deposit(strategy_config: StrategyConfig) -> None:
    expensive = build_simulation(strategy_config, fee_bps=200)
    expensive.fund("USDT", 100 * USDT_UNIT)

    with pytest.raises(SlippageExceeded):
        expensive.strategy.deposit("USDT", 100 * USDT_UNIT)
    assert expensive.tokens.balance_of("USDT", "strategy") == 100 * USDT_UNIT


def test_deposit_all_uses_every_idle_balance(sim: Simulation) -> None:
    sim.fund("DAI", 100 * DAI_UNIT)
    sim.fund("USDT", 50 * USDT_UNIT)

    minted = sim.strategy.deposit_all()

    assert minted == 150 * DAI_UNIT
    assert sim.strategy.ledger_state().staked_shares == minted
    deposits = sim.strategy.events.filter(kinds=["deposit"])
    assert [e.asset for e in deposits] == ["DAI", "USDT"]
    assert sum(e.shares for e in deposits) == minted
    assert [e.shares for e in deposits] == [100 * DAI_UNIT, 50 * DAI_UNIT]


def test_deposit_all_without_funds(sim: Simulation) -> None:
    with pytest.raises(NothingToDeposit):
        sim.strategy.deposit_all()


def test_withdraw_unstakes_then_redeems(sim: Simulation) -> None:
    sim.fund("USDC", 1_000 * USDC_UNIT)
    sim.strategy.deposit("USDC", 1_000 * USDC_UNIT)

    paid = sim.strategy.withdraw("alice", "USDC", 400 * USDC_UNIT)

    assert paid == 400 * USDC_UNIT
    assert sim.tokens.balance_of("USDC", "alice") == 400 * USDC_UNIT
    assert sim.strategy.ledger_state() == LedgerState(local_shares=0, staked_shares=600 * DAI_UNIT)
    assert _kinds(sim.strategy) == ["deposit", "stake", "unstake", "withdraw"]
    unstake = sim.strategy.events.filter(kinds=["unstake"])
    assert [e.shares for e in unstake] == [400 * DAI_UNIT]


def test_failed_withdrawal_restores_stake(sim: Simulation) -> None:
    sim.fund("USDC", 1_000 * USDC_UNIT)
    sim.strategy.deposit("USDC", 1_000 * USDC_UNIT)
    before = sim.strategy.ledger_state()

    # the pool holds no DAI reserve to pay out
    with pytest.raises(InsufficientBalance):
        sim.strategy.withdraw("alice", "DAI", 10 * DAI_UNIT)

    assert sim.strategy.ledger_state() == before
    assert sim.sink.staked_balance_of("strategy") == before.staked_shares
    assert _kinds(sim.strategy) == ["deposit", "stake"]


@pytest.mark.parametrize(
    ("recipient", "asset", "amount", "error"),
    [
        ("", "USDC", 1, InvalidRecipient),
        ("alice", "USDC", 0, InvalidAmount),
        ("alice", "USDC", 100.5, InvalidAmount),
        ("alice", "USDC", True, InvalidAmount),
        ("alice", "FRAX", 1, UnsupportedAsset),
    ],
)
def test_withdraw_rejects_bad_requests(
    sim: Simulation, recipient: str, asset: str, amount: int, error: type
) -> None:
    sim.fund("USDC", 10 * USDC_UNIT)
    sim.strategy.deposit("USDC", 10 * USDC_UNIT)

    before = sim.strategy.ledger_state()

    with pytest.raises(error):
        sim.strategy.withdraw(recipient, asset, amount)
    assert sim.strategy.ledger_state() == before
    assert sim.tokens.total_supply("3CRV") == before.total


def test_withdraw_without_shares(sim: Simulation) -> None:
    with pytest.raises(NoShares):
        sim.strategy.withdraw("alice", "USDC", 1)


class GenerousPool(InMemoryPool):
    """Pays five units more than quoted on single-coin redemptions."""

    def remove_liquidity_one_coin(self, shares: int, slot: int, min_out: int) -> int:
        amount = super().remove_liquidity_one_coin(shares, slot, min_out)
        self._tokens.transfer(self.coin_at(slot), self.address, self.account, 5)
        return amount + 5


def test_redemption_dust_goes_to_vault(sim: Simulation, strategy_config: StrategyConfig) -> None:
    pool = GenerousPool(
        sim.tokens,
        [("DAI", 18), ("USDC", 6), ("USDT", 6)],
        share_token="3CRV",
        account="strategy",
        fee_bps=0,
    )
    strategy = Strategy(strategy_config, pool, sim.sink, sim.tokens)
    sim.fund("USDC", 1_000 * USDC_UNIT)
    strategy.deposit("USDC", 1_000 * USDC_UNIT)

    paid = strategy.withdraw("alice", "USDC", 100 * USDC_UNIT)

    assert paid == 100 * USDC_UNIT
    assert sim.tokens.balance_of("USDC", "alice") == 100 * USDC_UNIT
    assert sim.tokens.balance_of("USDC", "vault") == 5
    assert sim.tokens.balance_of("USDC", "strategy") == 0


def test_withdraw_all_from_fully_staked_position(sim: Simulation) -> None:
    sim.fund("USDC", 1_000 * USDC_UNIT)
    sim.fund("DAI", 500 * DAI_UNIT)
    sim.strategy.deposit("USDC", 1_000 * USDC_UNIT)
    sim.strategy.deposit("DAI", 500 * DAI_UNIT)
    assert sim.strategy.ledger_state() == LedgerState(0, 1_500 * DAI_UNIT)

    forwarded = sim.strategy.withdraw_all()

    assert forwarded == {"DAI": 500 * DAI_UNIT, "USDC": 1_000 * USDC_UNIT, "USDT": 0}
    assert sim.tokens.balance_of("DAI", "vault") == 500 * DAI_UNIT
    assert sim.tokens.balance_of("USDC", "vault") == 1_000 * USDC_UNIT
    assert sim.strategy.ledger_state() == LedgerState(0, 0)
    unstake = sim.strategy.events.filter(kinds=["unstake"])
    assert [e.shares for e in unstake] == [1_500 * DAI_UNIT]
    exits = sim.strategy.events.filter(kinds=["withdraw_all"])
    assert sum(e.shares for e in exits) == 1_500 * DAI_UNIT
    assert {e.recipient for e in exits} == {"vault"}


def test_withdraw_all_with_only_idle_balances(sim: Simulation) -> None:
    sim.fund("USDT", 7)

    forwarded = sim.strategy.withdraw_all()

    assert forwarded == {"DAI": 0, "USDC": 0, "USDT": 7}
    assert sim.tokens.balance_of("USDT", "vault") == 7


def test_ledger_never_leaks_shares(sim: Simulation) -> None:
    strategy = sim.strategy
    for asset, amount in [("DAI", 300 * DAI_UNIT), ("USDC", 250 * USDC_UNIT), ("USDT", 75 * USDT_UNIT)]:
        sim.fund(asset, amount)
        strategy.deposit(asset, amount)
    strategy.withdraw("alice", "USDC", 100 * USDC_UNIT)
    strategy.withdraw("bob", "DAI", 42 * DAI_UNIT)

    state = strategy.ledger_state()
    minted = sum(e.shares for e in strategy.events.filter(kinds=["deposit"]))
    burned = sum(e.shares for e in strategy.events.filter(kinds=["withdraw"]))

    assert state.total == minted - burned
    assert state.local_shares == sim.tokens.balance_of("3CRV", "strategy")
    assert state.staked_shares == sim.tokens.balance_of("3CRV", "staking")
    assert sim.tokens.balance_of("USDC", "alice") == 100 * USDC_UNIT
    assert sim.tokens.balance_of("DAI", "bob") == 42 * DAI_UNIT
    assert [e.amount for e in strategy.events.filter(kinds=["withdraw"])] == [
        100 * USDC_UNIT,
        42 * DAI_UNIT,
    ]


class StingyPool(InMemoryPool):
    """Pays one unit less than quoted on single-coin redemptions."""

    def remove_liquidity_one_coin(self, shares: int, slot: int, min_out: int) -> int:
        amount = super().remove_liquidity_one_coin(shares, slot, min_out)
        self._tokens.transfer(self.coin_at(slot), self.account, self.address, 1)
        return amount - 1


def test_short_redemption_raises_and_rolls_back(
    sim: Simulation, strategy_config: StrategyConfig
) -> None:
    pool = StingyPool(
        sim.tokens,
        [("DAI", 18), ("USDC", 6), ("USDT", 6)],
        share_token="3CRV",
        account="strategy",
        fee_bps=0,
    )
    strategy = Strategy(strategy_config, pool, sim.sink, sim.tokens)
    sim.fund("USDC", 1_000 * USDC_UNIT)
    strategy.deposit("USDC", 1_000 * USDC_UNIT)
    before = strategy.ledger_state()

    with pytest.raises(SlippageExceeded) as info:
        strategy.withdraw("alice", "USDC", 100 * USDC_UNIT)

    assert info.value.actual == 100 * USDC_UNIT - 1
    assert info.value.minimum == 100 * USDC_UNIT
    assert strategy.ledger_state() == before
    assert sim.sink.staked_balance_of("strategy") == before.staked_shares
    assert sim.tokens.total_supply("3CRV") == before.total
    assert sim.tokens.balance_of("USDC", "alice") == 0
    assert sim.tokens.balance_of("USDC", "vault") == 0
    assert sim.tokens.balance_of("USDC", "pool") == 1_000 * USDC_UNIT
    assert _kinds(strategy) == ["deposit", "stake"]


def test_fee_rounding_shortfall_is_not_paid_out(fee_sim: Simulation) -> None:
    fee_sim.fund("USDC", 250 * USDC_UNIT)
    fee_sim.strategy.deposit("USDC", 250 * USDC_UNIT)
    before = fee_sim.strategy.ledger_state()

    with pytest.raises(SlippageExceeded):
        fee_sim.strategy.withdraw("alice", "USDC", 100 * USDC_UNIT)

    assert fee_sim.strategy.ledger_state() == before
    assert fee_sim.tokens.balance_of("USDC", "alice") == 0
    assert _kinds(fee_sim.strategy) == ["deposit", "stake"]


class RecordingPool(InMemoryPool):
    """Remembers the minimum vectors passed to proportional redemptions."""

    def __init__(self, *args, **kwargs) -> None:
        super().__init__(*args, **kwargs)
        self.min_vectors: list[list[int]] = []

    def remove_liquidity(self, shares: int, min_amounts: Sequence[int]) -> list[int]:
        self.min_vectors.append(list(min_amounts))
        return super().remove_liquidity(shares, min_amounts)


class SkimmingPool(InMemoryPool):
    """Quotes proportional redemptions two percent below the pro-rata reserves."""

    def remove_liquidity(self, shares: int, min_amounts: Sequence[int]) -> list[int]:
        supply = self._tokens.total_supply(self.share_token)
        for slot, minimum in enumerate(min_amounts):
            amount = self.reserve_balance(slot) * shares // supply * 98 // 100
            if amount < minimum:
                raise SlippageExceeded(amount, minimum)
        return super().remove_liquidity(shares, min_amounts)


def _seeded_strategy(
    pool_cls: type[InMemoryPool], sim: Simulation, strategy_config: StrategyConfig
) -> Simulation:
    pool = pool_cls(
        sim.tokens,
        [("DAI", 18), ("USDC", 6), ("USDT", 6)],
        share_token="3CRV",
        account="strategy",
        fee_bps=0,
    )
    strategy = Strategy(strategy_config, pool, sim.sink, sim.tokens)
    seeded = Simulation(strategy=strategy, tokens=sim.tokens, pool=pool, sink=sim.sink)
    seeded.seed_pool({"DAI": 1_000_000 * DAI_UNIT, "USDC": 1_000_000 * USDC_UNIT, "USDT": 1_000_000 * USDT_UNIT})
    seeded.fund("DAI", 500 * DAI_UNIT)
    seeded.fund("USDC", 1_000 * USDC_UNIT)
    strategy.deposit_all()
    return seeded


def test_withdraw_all_bounds_each_slot_from_one_snapshot(
    sim: Simulation, strategy_config: StrategyConfig
) -> None:
    seeded = _seeded_strategy(RecordingPool, sim, strategy_config)
    totals, snapshot = seeded.strategy.position()
    guard = seeded.strategy.guard
    expected = [
        guard.min_acceptable(totals.total * reserve // snapshot.share_total_supply)
        for reserve in snapshot.reserves
    ]
    ideal = [totals.total * r // snapshot.share_total_supply for r in snapshot.reserves]

    seeded.strategy.withdraw_all()

    assert seeded.pool.min_vectors == [expected]
    assert all(0 < m < i for m, i in zip(expected, ideal))


def test_withdraw_all_below_bound_restores_stake(
    sim: Simulation, strategy_config: StrategyConfig
) -> None:
    seeded = _seeded_strategy(SkimmingPool, sim, strategy_config)
    before = seeded.strategy.ledger_state()
    events_before = len(seeded.strategy.events)
    assert before.staked_shares == before.total > 0

    with pytest.raises(SlippageExceeded):
        seeded.strategy.withdraw_all()

    assert seeded.strategy.ledger_state() == before
    assert sim.sink.staked_balance_of("strategy") == before.staked_shares
    assert sim.tokens.balance_of("3CRV", "strategy") == 0
    assert sim.tokens.balance_of("DAI", "vault") == 0
    assert sim.tokens.balance_of("USDC", "vault") == 0
    assert len(seeded.strategy.events) == events_before



def test_check_balance_and_supports_asset(sim: Simulation) -> None:
    assert sim.strategy.check_balance("USDC") == 0

    sim.fund("USDC", 1_000 * USDC_UNIT)
    sim.strategy.deposit("USDC", 1_000 * USDC_UNIT)

    assert sim.strategy.check_balance("USDC") == 1_000 * USDC_UNIT
    assert sim.strategy.check_balance("DAI") == 0
    assert sim.strategy.holdings() == {"DAI": 0, "USDC": 1_000 * USDC_UNIT, "USDT": 0}
    assert sim.strategy.position() == (sim.strategy.ledger_state(), sim.strategy.snapshot())
    assert sim.strategy.supports_asset("USDT")
    assert not sim.strategy.supports_asset("FRAX")
    with pytest.raises(UnsupportedAsset):
        sim.strategy.check_balance("FRAX")


def test_concurrent_deposits_do_not_interleave(sim: Simulation) -> None:
    sim.fund("USDC", 80 * USDC_UNIT)

    threads = [
        threading.Thread(target=sim.strategy.deposit, args=("USDC", 10 * USDC_UNIT))
        for _ in range(8)
    ]
    for t in threads:
        t.start()
    for t in threads:
        t.join()

    assert sim.strategy.ledger_state() == LedgerState(0, 80 * DAI_UNIT)
    assert len(sim.strategy.events.filter(kinds=["deposit"])) == 8


def test_pool_coin_order_is_verified(sim: Simulation, strategy_config: StrategyConfig) -> None:
    swapped = InMemoryPool(
        sim.tokens,
        [("DAI", 18), ("USDT", 6), ("USDC", 6)],
        share_token="3CRV",
        account="strategy",
    )

    with pytest.raises(ConfigurationError):
        Strategy(strategy_config, swapped, sim.sink, sim.tokens)


def test_missing_vault_is_rejected(sim: Simulation, strategy_config: StrategyConfig) -> None:
    cfg = StrategyConfig(
        address="strategy",
        vault="",
        share_token="3CRV",
        assets=strategy_config.assets,
    )

    with pytest.raises(ConfigurationError):
        Strategy(cfg, sim.pool, sim.sink, sim.tokens)

"""Tests for profit accounting and collection"""

from vending_machine import (
    CoinReserve,
    Ledger,
    MachineConfig,
    Outcome,
    TransactionType,
    VendingMachine,
)


def test_baseline_is_captured_at_start():
    reserve = CoinReserve()
    ledger = Ledger(reserve)
    assert ledger.get_baseline_value() == 1880
    assert ledger.profit() == 0

    reserve.deposit(50)
    assert ledger.total_in_reserve() == 1930
    assert ledger.profit() == 50
    assert ledger.get_baseline_value() == 1880


def test_profit_and_collection(machine):
    """Sales raise profit, collect resets the reserve to its start state"""
    baseline = machine.total_in_reserve()

    machine.deposit_coin(100)
    machine.deposit_coin(20)
    assert machine.purchase(2).is_success()
    assert machine.profit() == 120

    report = machine.report()
    assert report.total == baseline + 120
    assert report.baseline == baseline
    assert report.profit == 120

    result = machine.collect()
    assert result.outcome == Outcome.SUCCESS
    assert result.amount == 120
    assert machine.total_in_reserve() == baseline
    assert machine.get_coin_reserve().get_counts() == {
        d: 10 for d in [100, 50, 20, 10, 5, 2, 1]
    }

    again = machine.collect()
    assert again.outcome == Outcome.NO_OP
    assert again.amount == 0
    assert machine.total_in_reserve() == baseline


def test_profit_counts_only_the_price(machine):
    machine.deposit_coin(100)
    machine.purchase(1)
    assert machine.profit() == 50


def test_negative_profit_is_reported_not_collected(machine, drain):
    """Unpaid change can drain the reserve below its baseline"""
    reserve = machine.get_coin_reserve()
    drain(reserve, 1)
    assert machine.profit() == -10

    result = machine.collect()
    assert result.outcome == Outcome.NO_OP
    assert result.amount == -10
    assert reserve.get_count(1) == 0
    assert machine.report().profit == -10


def test_collection_is_recorded(machine):
    machine.deposit_coin(50)
    machine.purchase(1)
    machine.collect()

    records = machine.get_transactions()
    assert [r.transaction_type for r in records] == [TransactionType.SALE,
                                                     TransactionType.COLLECTION]
    assert records[-1].amount == 50


def test_collect_restores_configured_stock():
    machine = VendingMachine(MachineConfig(denominations=[1, 5], initial_coin_count=4))
    reserve = machine.get_coin_reserve()
    assert reserve.get_initial_count() == 4
    assert machine.total_in_reserve() == 24

    machine.deposit_coin(5)
    machine.deposit_coin(5)
    assert machine.collect().amount == 10
    assert reserve.get_counts() == {5: reserve.get_initial_count(), 1: reserve.get_initial_count()}


def test_machine_ledger_tracks_its_reserve(machine):
    """The machine's ledger measures profit against its own reserve"""
    ledger = machine.get_ledger()
    assert ledger.get_baseline_value() == 1880

    machine.deposit_coin(20)
    assert ledger.total_in_reserve() == machine.total_in_reserve() == 1900
    assert ledger.profit() == 20
    assert ledger.get_history() == []

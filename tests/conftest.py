import pytest

from vending_machine import Catalog, CoinReserve, MachineConfig, VendingMachine


@pytest.fixture
def reserve():
    return CoinReserve()


@pytest.fixture
def catalog():
    return Catalog()


@pytest.fixture
def machine():
    """Machine with the default reserve and two items"""
    config = MachineConfig(seed_items=[("Water", 50, 10), ("Chips", 120, 1)])
    return VendingMachine(config)


@pytest.fixture
def drain():
    """Dispense every coin of one denomination from a reserve"""
    def _drain(reserve, denomination):
        while reserve.get_count(denomination) > 0:
            reserve.dispense(denomination)
    return _drain

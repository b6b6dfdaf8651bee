"""Tests for the text menu and result rendering"""

import pytest

from vending_console import (
    DEMO_ITEMS,
    VendingConsole,
    main,
    render_change,
    render_items,
    render_purchase,
    run_demo,
)
from vending_machine import MachineConfig, VendingMachine


def make_console(machine, answers, password="admin"):
    """Console fed from a list of answers, collecting output lines"""
    inputs = iter(answers)
    output = []
    console = VendingConsole(machine,
                             input_func=lambda prompt: next(inputs),
                             output_func=output.append,
                             admin_password=password)
    return console, output


def test_full_customer_session(machine):
    answers = [
        "2", "1", "100", "1", "abc", "1", "3", "2",  # coins: 100, bad input, unsupported 3
        "3", "1",                                     # buy Water
        "6",
    ]
    console, output = make_console(machine, answers)
    console.run()

    assert "Inserted 100. Balance: 100" in output
    assert "Invalid coin value" in output
    assert "Unsupported coin: 3" in output
    assert "You bought Water!" in output
    assert "Change: 50" in output
    assert "Coins returned: 50" in output
    assert output[-1] == "Goodbye!"
    assert machine.current_balance() == 0


def test_unknown_command(machine):
    console, output = make_console(machine, ["9", "6"])
    console.run()
    assert "Unknown command" in output


def test_buy_with_invalid_number(machine):
    console, output = make_console(machine, ["x"])
    console.buy_item()
    assert "Invalid item number" in output


def test_insufficient_funds_message(machine):
    machine.deposit_coin(20)
    console, output = make_console(machine, ["1"])
    console.buy_item()
    assert "Not enough money. Price: 50, balance: 20, insert 30 more" in output
    assert machine.current_balance() == 20


def test_refund_messages(machine):
    console, output = make_console(machine, [])
    console.refund()
    assert output == ["Nothing to refund"]

    machine.deposit_coin(5)
    machine.deposit_coin(10)
    output.clear()
    console.refund()
    assert output == ["Refunding 15", "Coins returned: 10 5"]


def test_admin_requires_password(machine):
    console, output = make_console(machine, ["letmein"])
    console.admin_mode()
    assert output == ["Wrong password"]


def test_admin_restock_report_collect(machine):
    answers = [
        "admin",
        "1", "water", "60", "5",
        "1", "Tea", "abc", "1",
        "1", "", "10", "1",
        "2",
        "3",
        "4",
    ]
    machine.deposit_coin(50)
    machine.purchase(1)

    console, output = make_console(machine, answers)
    console.admin_mode()

    assert "Price of Water changed from 50 to 60" in output
    assert "Item 'Water' restocked (14 in stock)" in output
    assert "Price must be a number" in output
    assert "Restock rejected: Item name cannot be blank" in output
    assert "Total money in machine: 1930" in output
    assert "Profit: 50" in output
    assert "Collected profit: 50" in output
    assert machine.profit() == 0


def test_render_items():
    machine = VendingMachine(MachineConfig(seed_items=[("Water", 50, 1)]))
    assert render_items(machine.list_items()) == ["1. Water - 50 (1 left)"]

    machine.deposit_coin(50)
    machine.purchase(1)
    assert render_items(machine.list_items()) == ["1. Water - 50 (OUT OF STOCK)"]
    assert render_items([]) == ["No items available"]


def test_render_change_shortfall(machine, drain):
    reserve = machine.get_coin_reserve()
    drain(reserve, 1)
    drain(reserve, 2)
    machine.deposit_coin(50)
    machine.deposit_coin(5)
    machine.deposit_coin(2)

    lines = render_purchase(machine.purchase(1))
    assert "Change: 7" in lines
    assert "Coins returned: 5 2" in lines

    drain(reserve, 5)
    drain(reserve, 10)
    for _ in range(3):
        machine.deposit_coin(20)
    result = machine.purchase(1)
    assert render_change(result.change) == ["Warning: could not return 10 of change"]
    assert render_change(None) == []


def test_run_demo(capsys):
    run_demo(VendingMachine(MachineConfig(seed_items=DEMO_ITEMS)))
    out = capsys.readouterr().out
    assert "=== Demo Complete ===" in out
    assert "Collected profit:" in out
    assert "No profit to collect" in out


def test_main_demo(capsys):
    assert main(["--demo"]) == 0
    assert "You bought Water!" in capsys.readouterr().out


def test_main_interactive_exit(monkeypatch, capsys):
    answers = iter(["6"])
    monkeypatch.setattr("builtins.input", lambda prompt="": next(answers))
    assert main([]) == 0
    assert "Goodbye!" in capsys.readouterr().out


@pytest.mark.parametrize("error", [KeyboardInterrupt, EOFError])
def test_main_interrupted(monkeypatch, capsys, error):
    def interrupt(prompt=""):
        raise error()
    monkeypatch.setattr("builtins.input", interrupt)
    assert main([]) == 0
    assert "Goodbye!" in capsys.readouterr().out

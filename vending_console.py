import argparse
import logging
import sys
from typing import Callable, Dict, List, Optional

from vending_machine import (
    CatalogEntry,
    CollectionResult,
    DepositResult,
    DispenseResult,
    ItemStatus,
    LedgerReport,
    MachineConfig,
    Notice,
    Outcome,
    PurchaseResult,
    RefundResult,
    RestockResult,
    VendingMachine,
)


DEFAULT_ADMIN_PASSWORD = "admin"

DEMO_ITEMS = [
    ("Water", 50, 10),
    ("Cola", 85, 8),
    ("Chips", 120, 5),
    ("Chocolate", 73, 6),
]


# ==================== Rendering ====================

def render_items(entries: List[CatalogEntry]) -> List[str]:
    if not entries:
        return ["No items available"]

    lines = []
    for entry in entries:
        if entry.status == ItemStatus.IN_STOCK:
            status = f"{entry.stock} left"
        else:
            status = "OUT OF STOCK"
        lines.append(f"{entry.position}. {entry.name} - {entry.price} ({status})")
    return lines


def render_change(change: Optional[DispenseResult]) -> List[str]:
    if change is None:
        return []

    lines = []
    if change.coins:
        lines.append("Coins returned: " + " ".join(str(c) for c in change.coins))
    if not change.is_complete():
        lines.append(f"Warning: could not return {change.remainder} of change")
    return lines


def render_deposit(result: DepositResult) -> List[str]:
    if result.outcome == Outcome.UNSUPPORTED_DENOMINATION:
        return [f"Unsupported coin: {result.denomination}"]
    return [f"Inserted {result.denomination}. Balance: {result.balance}"]


def render_purchase(result: PurchaseResult) -> List[str]:
    if result.outcome == Outcome.INVALID_SELECTION:
        return ["Invalid item selection"]
    if result.outcome == Outcome.OUT_OF_STOCK:
        return [f"{result.item_name} is out of stock"]
    if result.outcome == Outcome.INSUFFICIENT_FUNDS:
        return [f"Not enough money. Price: {result.price}, balance: {result.balance}, "
                f"insert {result.shortfall} more"]

    lines = [f"You bought {result.item_name}!"]
    if result.change_due > 0:
        lines.append(f"Change: {result.change_due}")
        lines.extend(render_change(result.change))
    return lines


def render_refund(result: RefundResult) -> List[str]:
    if result.outcome == Outcome.NO_OP:
        return ["Nothing to refund"]
    return [f"Refunding {result.amount}"] + render_change(result.change)


def render_restock(result: RestockResult) -> List[str]:
    if result.outcome == Outcome.INVALID_ARGUMENT:
        return [f"Restock rejected: {result.reason}"]

    lines = []
    if result.has_notice(Notice.PRICE_CHANGED):
        lines.append(f"Price of {result.item_name} changed from "
                     f"{result.previous_price} to {result.price}")
    if result.created:
        lines.append(f"Item '{result.item_name}' added ({result.stock} in stock)")
    else:
        lines.append(f"Item '{result.item_name}' restocked ({result.stock} in stock)")
    return lines


def render_report(report: LedgerReport) -> List[str]:
    return [f"Total money in machine: {report.total}",
            f"Profit: {report.profit}"]


def render_collection(result: CollectionResult) -> List[str]:
    if result.is_success():
        return [f"Collected profit: {result.amount}", "Money collected"]
    return ["No profit to collect"]


# ==================== Console ====================

class VendingConsole:
    """Text menu driving a single vending machine"""

    def __init__(self, machine: VendingMachine,
                 input_func: Optional[Callable[[str], str]] = None,
                 output_func: Optional[Callable[[str], None]] = None,
                 admin_password: str = DEFAULT_ADMIN_PASSWORD):
        self._machine = machine
        self._input = input_func or input
        self._output = output_func or print
        self._admin_password = admin_password

    def _show(self, lines: List[str]) -> None:
        for line in lines:
            self._output(line)

    def _read_int(self, prompt: str) -> Optional[int]:
        raw = self._input(prompt).strip()
        try:
            return int(raw)
        except ValueError:
            return None

    def run(self) -> None:
        """Main menu loop, returns when the user chooses exit"""
        self._output("Welcome to the vending machine!")

        actions: Dict[str, Callable[[], None]] = {
            "1": self.show_items,
            "2": self.insert_coins,
            "3": self.buy_item,
            "4": self.refund,
            "5": self.admin_mode,
        }

        while True:
            self._output(f"\nYour balance: {self._machine.current_balance()}")
            self._output("1. Show items")
            self._output("2. Insert coins")
            self._output("3. Buy item")
            self._output("4. Return money")
            self._output("5. Operator mode")
            self._output("6. Exit")
            choice = self._input("Choose an action: ").strip()

            if choice == "6":
                self._output("Goodbye!")
                return

            action = actions.get(choice)
            if action:
                action()
            else:
                self._output("Unknown command")

    def show_items(self) -> None:
        self._output("\n=== Available items ===")
        self._show(render_items(self._machine.list_items()))

    def insert_coins(self) -> None:
        accepted = ", ".join(str(d) for d in self._machine.get_coin_reserve().get_denominations())

        while True:
            self._output(f"\nCurrent balance: {self._machine.current_balance()}")
            self._output("1. Insert a coin")
            self._output("2. Back")
            choice = self._input("Choose: ").strip()

            if choice == "1":
                denomination = self._read_int(f"Coin value ({accepted}): ")
                if denomination is None:
                    self._output("Invalid coin value")
                    continue
                self._show(render_deposit(self._machine.deposit_coin(denomination)))
            elif choice == "2":
                return
            else:
                self._output("Unknown command")

    def buy_item(self) -> None:
        self.show_items()
        position = self._read_int("Item number: ")
        if position is None:
            self._output("Invalid item number")
            return
        self._show(render_purchase(self._machine.purchase(position)))

    def refund(self) -> None:
        self._show(render_refund(self._machine.refund()))

    def admin_mode(self) -> None:
        password = self._input("Password: ")
        if password != self._admin_password:
            self._output("Wrong password")
            return

        while True:
            self._output("\nOperator mode")
            self._output("1. Add item")
            self._output("2. Show total money")
            self._output("3. Collect money")
            self._output("4. Back")
            choice = self._input("Choose: ").strip()

            if choice == "1":
                self.restock()
            elif choice == "2":
                self._show(render_report(self._machine.report()))
            elif choice == "3":
                self._show(render_collection(self._machine.collect()))
            elif choice == "4":
                return
            else:
                self._output("Unknown command")

    def restock(self) -> None:
        name = self._input("Item name: ")
        price = self._read_int("Price: ")
        quantity = self._read_int("Quantity: ")

        if price is None:
            self._output("Price must be a number")
            return
        if quantity is None:
            self._output("Quantity must be a number")
            return

        self._show(render_restock(self._machine.restock(name, price, quantity)))


# ==================== Demo Usage ====================

def print_separator(title: str):
    """Print formatted separator"""
    print("\n" + "=" * 70)
    print(f"TEST CASE: {title}")
    print("=" * 70)


def run_demo(machine: VendingMachine) -> None:
    """Scripted walk through the customer and operator flows"""
    def show(lines: List[str]) -> None:
        for line in lines:
            print(line)

    print("=== Vending Machine Demo ===")
    show(render_items(machine.list_items()))
    show(render_report(machine.report()))

    print_separator("Exact Payment")
    show(render_deposit(machine.deposit_coin(50)))
    show(render_purchase(machine.purchase(1)))

    print_separator("Payment With Change")
    show(render_deposit(machine.deposit_coin(100)))
    show(render_deposit(machine.deposit_coin(20)))
    show(render_purchase(machine.purchase(2)))

    print_separator("Insufficient Funds")
    show(render_deposit(machine.deposit_coin(100)))
    show(render_purchase(machine.purchase(3)))
    show(render_deposit(machine.deposit_coin(20)))
    show(render_purchase(machine.purchase(3)))

    print_separator("Unsupported Coin")
    show(render_deposit(machine.deposit_coin(3)))

    print_separator("Refund")
    show(render_deposit(machine.deposit_coin(5)))
    show(render_deposit(machine.deposit_coin(10)))
    show(render_refund(machine.refund()))
    show(render_refund(machine.refund()))

    print_separator("Restock And Price Change")
    show(render_restock(machine.restock("water", 60, 5)))
    show(render_restock(machine.restock("", 10, 1)))
    show(render_items(machine.list_items()))

    print_separator("Collect Profit")
    show(render_report(machine.report()))
    show(render_collection(machine.collect()))
    show(render_collection(machine.collect()))

    print("\nTransactions:")
    for record in machine.get_transactions():
        print(f"  {record.timestamp.strftime('%Y-%m-%d %H:%M:%S')} - {record.transaction_id} - "
              f"{record.transaction_type.value} - {record.amount}")

    print("\n=== Demo Complete ===")


def main(argv: Optional[List[str]] = None) -> int:
    """Main entry point"""
    parser = argparse.ArgumentParser(description="Coin-operated vending machine")
    parser.add_argument(
        '--demo',
        action='store_true',
        help="Run a scripted demo instead of the interactive menu"
    )
    parser.add_argument(
        '--log-level',
        default="WARNING",
        help="Logging level for machine events (default: WARNING)"
    )
    args = parser.parse_args(argv)

    logging.basicConfig(
        level=getattr(logging, args.log_level.upper(), logging.WARNING),
        format='%(asctime)s - %(name)s - %(levelname)s - %(message)s',
        handlers=[logging.StreamHandler(sys.stderr)]
    )

    if args.demo:
        run_demo(VendingMachine(MachineConfig(seed_items=DEMO_ITEMS)))
        return 0

    try:
        VendingConsole(VendingMachine()).run()
    except (KeyboardInterrupt, EOFError):
        print("\nGoodbye!")
    return 0


if __name__ == "__main__":
    sys.exit(main())

import logging
from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from threading import RLock
from typing import Dict, Iterable, List, Optional, Sequence, Tuple


logger = logging.getLogger(__name__)


DEFAULT_DENOMINATIONS: Tuple[int, ...] = (1, 2, 5, 10, 20, 50, 100)
DEFAULT_INITIAL_COIN_COUNT = 10


# ==================== Enums ====================

class ItemStatus(Enum):
    """Availability of a catalog item"""
    IN_STOCK = "IN_STOCK"
    OUT_OF_STOCK = "OUT_OF_STOCK"


class MachineState(Enum):
    """Balance-driven states of the machine"""
    IDLE = "IDLE"
    ACCUMULATING = "ACCUMULATING"


class Outcome(Enum):
    """Outcome of a public machine operation"""
    SUCCESS = "SUCCESS"
    NO_OP = "NO_OP"
    UNSUPPORTED_DENOMINATION = "UNSUPPORTED_DENOMINATION"
    INVALID_SELECTION = "INVALID_SELECTION"
    OUT_OF_STOCK = "OUT_OF_STOCK"
    INSUFFICIENT_FUNDS = "INSUFFICIENT_FUNDS"
    INVALID_ARGUMENT = "INVALID_ARGUMENT"


class Notice(Enum):
    """Informational warnings attached to a successful operation"""
    CHANGE_SHORTFALL = "CHANGE_SHORTFALL"
    PRICE_CHANGED = "PRICE_CHANGED"


class TransactionType(Enum):
    """Kinds of recorded transactions"""
    SALE = "SALE"
    REFUND = "REFUND"
    COLLECTION = "COLLECTION"


# ==================== Errors ====================

class VendingError(Exception):
    """Base exception for vending machine components"""
    pass


class UnsupportedDenominationError(VendingError):
    """Coin value outside the accepted denomination set"""

    def __init__(self, denomination: int):
        super().__init__(f"Unsupported denomination: {denomination}")
        self.denomination = denomination


class PositionOutOfRangeError(VendingError):
    """Catalog position outside 1..len(catalog)"""

    def __init__(self, position: int, size: int):
        super().__init__(f"Position {position} is out of range (1..{size})")
        self.position = position
        self.size = size


class OutOfStockError(VendingError):
    """Item has no stock left"""

    def __init__(self, name: str):
        super().__init__(f"{name} is out of stock")
        self.name = name


class InsufficientFundsError(VendingError):
    """Balance does not cover the price"""

    def __init__(self, shortfall: int):
        super().__init__(f"Insufficient funds, {shortfall} more required")
        self.shortfall = shortfall


class InvalidArgumentError(VendingError):
    """Rejected restock arguments"""

    def __init__(self, reason: str):
        super().__init__(reason)
        self.reason = reason


# ==================== Configuration ====================

@dataclass
class MachineConfig:
    """Construction parameters for a vending machine"""
    denominations: Sequence[int] = DEFAULT_DENOMINATIONS
    initial_coin_count: int = DEFAULT_INITIAL_COIN_COUNT
    # (name, price, quantity) triples stocked before the first customer
    seed_items: Sequence[Tuple[str, int, int]] = ()

    def __post_init__(self):
        if not self.denominations:
            raise ValueError("At least one denomination is required")
        if any(d <= 0 for d in self.denominations):
            raise ValueError("Denominations must be positive")
        if len(set(self.denominations)) != len(self.denominations):
            raise ValueError("Denominations must be unique")
        if self.initial_coin_count < 0:
            raise ValueError("Initial coin count cannot be negative")


def _is_positive_int(value) -> bool:
    return isinstance(value, int) and not isinstance(value, bool) and value > 0


# ==================== Coin Reserve ====================

@dataclass
class DispenseResult:
    """Coins handed out for a change request and the part left unpaid"""
    coins: List[int] = field(default_factory=list)
    remainder: int = 0

    @property
    def dispensed_total(self) -> int:
        return sum(self.coins)

    def is_complete(self) -> bool:
        return self.remainder == 0

    def breakdown(self) -> Dict[int, int]:
        """Denomination -> count, largest first"""
        counts: Dict[int, int] = {}
        for coin in self.coins:
            counts[coin] = counts.get(coin, 0) + 1
        return counts


class CoinReserve:
    """Physical coins held by the machine for making change"""

    def __init__(self, denominations: Sequence[int] = DEFAULT_DENOMINATIONS,
                 initial_count: int = DEFAULT_INITIAL_COIN_COUNT):
        self._denominations = sorted(denominations)
        self._initial_count = initial_count
        self._counts: Dict[int, int] = {}
        self.reset_to_baseline_stock()

    def get_denominations(self) -> List[int]:
        return list(self._denominations)

    def get_initial_count(self) -> int:
        return self._initial_count

    def supports(self, denomination: int) -> bool:
        return _is_positive_int(denomination) and denomination in self._counts

    def get_count(self, denomination: int) -> int:
        return self._counts.get(denomination, 0)

    def get_counts(self) -> Dict[int, int]:
        """Current counts, largest denomination first"""
        return {d: self._counts[d] for d in reversed(self._denominations)}

    def deposit(self, denomination: int) -> None:
        """Accept one coin into the reserve"""
        if not self.supports(denomination):
            raise UnsupportedDenominationError(denomination)
        self._counts[denomination] += 1

    def dispense(self, amount: int) -> DispenseResult:
        """
        Pay out `amount` greedily, largest denomination first.

        Stops when no available coin fits the remainder. Larger coins are
        never substituted and no alternative combination is searched, so a
        depleted small denomination leaves a nonzero remainder.
        """
        if amount < 0:
            raise ValueError("Amount to dispense cannot be negative")

        result = DispenseResult()
        remaining = amount

        for denom in reversed(self._denominations):
            while remaining >= denom and self._counts[denom] > 0:
                self._counts[denom] -= 1
                remaining -= denom
                result.coins.append(denom)

        result.remainder = remaining
        return result

    def total_value(self) -> int:
        return sum(denom * count for denom, count in self._counts.items())

    def reset_to_baseline_stock(self) -> None:
        """Drop all coins and restock every denomination to the initial count"""
        self._counts = {d: self._initial_count for d in self._denominations}

    def __repr__(self) -> str:
        return f"CoinReserve(total={self.total_value()}, counts={self.get_counts()})"


# ==================== Catalog ====================

class Item:
    """A purchasable item and its stock"""

    def __init__(self, name: str, price: int, stock: int):
        self._name = name
        self._price = price
        self._stock = stock

    def get_name(self) -> str:
        return self._name

    def get_price(self) -> int:
        return self._price

    def get_stock(self) -> int:
        return self._stock

    def is_available(self) -> bool:
        return self._stock > 0

    def matches(self, name: str) -> bool:
        """Case-insensitive name comparison"""
        return self._name.casefold() == name.strip().casefold()

    def set_price(self, price: int) -> None:
        self._price = price

    def add_stock(self, quantity: int) -> None:
        self._stock += quantity

    def remove_one(self) -> None:
        if self._stock <= 0:
            raise OutOfStockError(self._name)
        self._stock -= 1

    def __repr__(self) -> str:
        return f"Item({self._name}, {self._price}, Qty: {self._stock})"


@dataclass
class CatalogEntry:
    """Display row for one catalog position"""
    position: int
    name: str
    price: int
    stock: int
    status: ItemStatus


@dataclass
class UpsertResult:
    """What a catalog upsert did"""
    item: Item
    created: bool
    previous_price: Optional[int] = None

    def price_changed(self) -> bool:
        return self.previous_price is not None


class Catalog:
    """Ordered items addressed by 1-based position"""

    def __init__(self):
        self._items: List[Item] = []

    def __len__(self) -> int:
        return len(self._items)

    def list(self) -> List[CatalogEntry]:
        return [
            CatalogEntry(
                position=index,
                name=item.get_name(),
                price=item.get_price(),
                stock=item.get_stock(),
                status=ItemStatus.IN_STOCK if item.is_available() else ItemStatus.OUT_OF_STOCK,
            )
            for index, item in enumerate(self._items, start=1)
        ]

    def get(self, position: int) -> Item:
        if not _is_positive_int(position) or position > len(self._items):
            raise PositionOutOfRangeError(position, len(self._items))
        return self._items[position - 1]

    def find(self, name: str) -> Optional[Item]:
        for item in self._items:
            if item.matches(name):
                return item
        return None

    def upsert(self, name: str, price: int, quantity: int) -> UpsertResult:
        """Add a new item or merge stock into the one with the same name"""
        if not isinstance(name, str) or not name.strip():
            raise InvalidArgumentError("Item name cannot be blank")
        if not _is_positive_int(price):
            raise InvalidArgumentError("Price must be a positive integer")
        if not _is_positive_int(quantity):
            raise InvalidArgumentError("Quantity must be a positive integer")

        existing = self.find(name)
        if existing is None:
            item = Item(name.strip(), price, quantity)
            self._items.append(item)
            return UpsertResult(item=item, created=True)

        previous_price = None
        if existing.get_price() != price:
            previous_price = existing.get_price()
            existing.set_price(price)
        existing.add_stock(quantity)
        return UpsertResult(item=existing, created=False, previous_price=previous_price)

    def seed(self, items: Iterable[Tuple[str, int, int]]) -> None:
        for name, price, quantity in items:
            self.upsert(name, price, quantity)

    def decrement_stock(self, position: int) -> None:
        self.get(position).remove_one()


# ==================== Ledger ====================

@dataclass
class TransactionRecord:
    """Entry in the machine's transaction log"""
    transaction_id: str
    transaction_type: TransactionType
    amount: int
    timestamp: datetime
    item_name: Optional[str] = None
    change_remainder: int = 0

    def __repr__(self) -> str:
        return f"Transaction({self.transaction_id}, {self.transaction_type.value}, {self.amount})"


@dataclass
class LedgerReport:
    """Reserve total and profit snapshot"""
    total: int
    baseline: int
    profit: int


@dataclass
class CollectionResult:
    outcome: Outcome
    amount: int = 0

    def is_success(self) -> bool:
        return self.outcome == Outcome.SUCCESS


class Ledger:
    """Profit accounting against the reserve value captured at start-up"""

    def __init__(self, reserve: CoinReserve):
        self._reserve = reserve
        self._baseline_value = reserve.total_value()
        self._transactions: List[TransactionRecord] = []
        self._transaction_counter = 0

    def get_baseline_value(self) -> int:
        return self._baseline_value

    def total_in_reserve(self) -> int:
        return self._reserve.total_value()

    def profit(self) -> int:
        """Negative when unpaid change remainders drained the float"""
        return self.total_in_reserve() - self._baseline_value

    def report(self) -> LedgerReport:
        total = self.total_in_reserve()
        return LedgerReport(total=total, baseline=self._baseline_value,
                            profit=total - self._baseline_value)

    def collect(self) -> CollectionResult:
        """Withdraw profit, leaving the reserve at its initial stock"""
        profit = self.profit()
        if profit <= 0:
            return CollectionResult(outcome=Outcome.NO_OP, amount=profit)

        self._reserve.reset_to_baseline_stock()
        self.record(TransactionType.COLLECTION, profit)
        return CollectionResult(outcome=Outcome.SUCCESS, amount=profit)

    def record(self, transaction_type: TransactionType, amount: int,
               item_name: Optional[str] = None, change_remainder: int = 0) -> TransactionRecord:
        self._transaction_counter += 1
        record = TransactionRecord(
            transaction_id=f"TXN-{self._transaction_counter:08d}",
            transaction_type=transaction_type,
            amount=amount,
            timestamp=datetime.now(),
            item_name=item_name,
            change_remainder=change_remainder,
        )
        self._transactions.append(record)
        return record

    def get_history(self) -> List[TransactionRecord]:
        return list(self._transactions)


# ==================== Operation Results ====================

@dataclass
class OperationResult:
    """Common shape of every public machine operation's result"""
    outcome: Outcome
    notices: List[Notice] = field(default_factory=list)

    def is_success(self) -> bool:
        return self.outcome == Outcome.SUCCESS

    def has_notice(self, notice: Notice) -> bool:
        return notice in self.notices


@dataclass
class DepositResult(OperationResult):
    denomination: int = 0
    balance: int = 0


@dataclass
class PurchaseResult(OperationResult):
    position: int = 0
    item_name: Optional[str] = None
    price: int = 0
    balance: int = 0
    change_due: int = 0
    change: Optional[DispenseResult] = None
    # Missing amount when the balance did not cover the price
    shortfall: int = 0


@dataclass
class RefundResult(OperationResult):
    amount: int = 0
    change: Optional[DispenseResult] = None


@dataclass
class RestockResult(OperationResult):
    item_name: Optional[str] = None
    price: int = 0
    stock: int = 0
    created: bool = False
    previous_price: Optional[int] = None
    reason: Optional[str] = None


# ==================== Main Vending Machine Class ====================

class VendingMachine:
    """Transaction engine tying together catalog, coin reserve and ledger"""

    def __init__(self, config: Optional[MachineConfig] = None):
        self._config = config or MachineConfig()
        self._reserve = CoinReserve(self._config.denominations,
                                    self._config.initial_coin_count)
        self._catalog = Catalog()
        self._catalog.seed(self._config.seed_items)
        # Baseline is captured here, after initial stocking
        self._ledger = Ledger(self._reserve)
        self._balance = 0
        self._lock = RLock()

    def get_config(self) -> MachineConfig:
        return self._config

    def get_coin_reserve(self) -> CoinReserve:
        return self._reserve

    def get_catalog(self) -> Catalog:
        return self._catalog

    def get_ledger(self) -> Ledger:
        return self._ledger

    def current_balance(self) -> int:
        with self._lock:
            return self._balance

    def get_state(self) -> MachineState:
        with self._lock:
            return MachineState.ACCUMULATING if self._balance > 0 else MachineState.IDLE

    # Customer operations

    def list_items(self) -> List[CatalogEntry]:
        with self._lock:
            return self._catalog.list()

    def deposit_coin(self, denomination: int) -> DepositResult:
        """Insert one coin"""
        with self._lock:
            try:
                self._reserve.deposit(denomination)
            except UnsupportedDenominationError:
                logger.debug("Rejected coin of value %s", denomination)
                return DepositResult(outcome=Outcome.UNSUPPORTED_DENOMINATION,
                                     denomination=denomination, balance=self._balance)

            self._balance += denomination
            logger.debug("Accepted coin %s, balance %s", denomination, self._balance)
            return DepositResult(outcome=Outcome.SUCCESS, denomination=denomination,
                                 balance=self._balance)

    def purchase(self, position: int) -> PurchaseResult:
        """
        Buy the item at a 1-based catalog position.

        Failed guards leave balance, stock and reserve untouched. Once the
        balance covers the price the sale always completes: change is paid
        greedily, any unpaid remainder is reported as CHANGE_SHORTFALL and
        kept by the machine, and the balance returns to zero.
        """
        with self._lock:
            try:
                item = self._catalog.get(position)
            except PositionOutOfRangeError:
                return PurchaseResult(outcome=Outcome.INVALID_SELECTION,
                                      position=position, balance=self._balance)

            if not item.is_available():
                return PurchaseResult(outcome=Outcome.OUT_OF_STOCK, position=position,
                                      item_name=item.get_name(), price=item.get_price(),
                                      balance=self._balance)

            price = item.get_price()
            if self._balance < price:
                return PurchaseResult(outcome=Outcome.INSUFFICIENT_FUNDS, position=position,
                                      item_name=item.get_name(), price=price,
                                      balance=self._balance, shortfall=price - self._balance)

            self._catalog.decrement_stock(position)
            change_due = self._balance - price
            change = None
            notices: List[Notice] = []

            if change_due > 0:
                change = self._reserve.dispense(change_due)
                if not change.is_complete():
                    notices.append(Notice.CHANGE_SHORTFALL)
                    logger.warning("Could not return %s of %s change for %s",
                                   change.remainder, change_due, item.get_name())

            self._balance = 0
            self._ledger.record(TransactionType.SALE, price, item_name=item.get_name(),
                                change_remainder=change.remainder if change else 0)
            logger.info("Sold %s for %s, change due %s", item.get_name(), price, change_due)

            return PurchaseResult(outcome=Outcome.SUCCESS, notices=notices, position=position,
                                  item_name=item.get_name(), price=price, balance=0,
                                  change_due=change_due, change=change)

    def refund(self) -> RefundResult:
        """Return the staged balance as coins"""
        with self._lock:
            if self._balance == 0:
                return RefundResult(outcome=Outcome.NO_OP)

            amount = self._balance
            change = self._reserve.dispense(amount)
            notices: List[Notice] = []
            if not change.is_complete():
                notices.append(Notice.CHANGE_SHORTFALL)
                logger.warning("Could not refund %s of %s", change.remainder, amount)

            self._balance = 0
            self._ledger.record(TransactionType.REFUND, amount,
                                change_remainder=change.remainder)
            logger.info("Refunded %s", amount)
            return RefundResult(outcome=Outcome.SUCCESS, notices=notices,
                                amount=amount, change=change)

    # Operator operations

    def restock(self, name: str, price: int, quantity: int) -> RestockResult:
        """Add stock for an item, creating it or updating its price as needed"""
        with self._lock:
            try:
                upserted = self._catalog.upsert(name, price, quantity)
            except InvalidArgumentError as e:
                return RestockResult(outcome=Outcome.INVALID_ARGUMENT, item_name=name,
                                     price=price, stock=quantity, reason=e.reason)

            item = upserted.item
            notices = [Notice.PRICE_CHANGED] if upserted.price_changed() else []
            logger.info("Restocked %s: +%s at %s (stock %s)", item.get_name(), quantity,
                        item.get_price(), item.get_stock())
            return RestockResult(outcome=Outcome.SUCCESS, notices=notices,
                                 item_name=item.get_name(), price=item.get_price(),
                                 stock=item.get_stock(), created=upserted.created,
                                 previous_price=upserted.previous_price)

    def total_in_reserve(self) -> int:
        with self._lock:
            return self._ledger.total_in_reserve()

    def profit(self) -> int:
        with self._lock:
            return self._ledger.profit()

    def report(self) -> LedgerReport:
        with self._lock:
            return self._ledger.report()

    def collect(self) -> CollectionResult:
        with self._lock:
            result = self._ledger.collect()
            if result.is_success():
                logger.info("Collected profit of %s", result.amount)
            return result

    def get_transactions(self) -> List[TransactionRecord]:
        with self._lock:
            return self._ledger.get_history()

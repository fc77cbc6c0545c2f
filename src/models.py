import functools
from dataclasses import dataclass, field
from decimal import (
    Context,
    Decimal,
    DivisionByZero,
    Inexact,
    InvalidOperation,
    Overflow,
    ROUND_HALF_EVEN,
    localcontext,
)
from enum import Enum
from typing import Dict, Optional

ClientId = int
TransactionId = int

AMOUNT_PRECISION = Decimal("0.0001")
MAX_CLIENT_ID = 2**16 - 1
MAX_TRANSACTION_ID = 2**32 - 1
MAX_AMOUNT = Decimal("100000000000000")

ZERO = Decimal("0")

# Balance arithmetic is exact: any rounding raises Inexact.
LEDGER_CONTEXT = Context(
    prec=50,
    rounding=ROUND_HALF_EVEN,
    traps=[DivisionByZero, Inexact, InvalidOperation, Overflow],
)


def exact_arithmetic(method):
    @functools.wraps(method)
    def wrapper(*args, **kwargs):
        with localcontext(LEDGER_CONTEXT):
            return method(*args, **kwargs)
    return wrapper


class LedgerError(ValueError):
    """Base class for structural errors raised outside the ledger core."""


class TransactionParseError(LedgerError):
    def __init__(self, message: str, line_number: Optional[int] = None, row=None):
        self.line_number = line_number
        self.row = row
        if line_number is not None:
            message = f"line {line_number}: {message}"
        super().__init__(message)


class TransactionType(Enum):
    DEPOSIT = "deposit"
    WITHDRAWAL = "withdrawal"
    DISPUTE = "dispute"
    RESOLVE = "resolve"
    CHARGEBACK = "chargeback"

    @property
    def requires_amount(self) -> bool:
        return self in (TransactionType.DEPOSIT, TransactionType.WITHDRAWAL)


class ProcessingResult(Enum):
    APPLIED = "applied"
    IGNORED_LOCKED = "ignored_locked"
    IGNORED_INSUFFICIENT_FUNDS = "ignored_insufficient_funds"
    IGNORED_UNKNOWN_TRANSACTION = "ignored_unknown_transaction"
    IGNORED_NOT_HELD = "ignored_not_held"

    @property
    def applied(self) -> bool:
        return self is ProcessingResult.APPLIED


@dataclass(frozen=True)
class Transaction:
    transaction_type: TransactionType
    client_id: ClientId
    transaction_id: TransactionId
    amount: Optional[Decimal] = None

    def __post_init__(self):
        if self.transaction_type.requires_amount:
            if self.amount is None:
                raise ValueError(f"{self.transaction_type.value} requires an amount")
            if self.amount < 0:
                raise ValueError(f"{self.transaction_type.value} amount must not be negative, got {self.amount}")
        elif self.amount is not None:
            # dispute/resolve/chargeback reference a deposit; any amount given is ignored
            object.__setattr__(self, "amount", None)

    def __repr__(self) -> str:
        return f"Transaction({self.transaction_type.value}, client={self.client_id}, tx={self.transaction_id}, amount={self.amount})"


@dataclass(frozen=True)
class AccountSummary:
    client: ClientId
    available: Decimal
    held: Decimal
    total: Decimal
    locked: bool


@dataclass
class ClientAccount:
    """
    Per-client balances.

    Held funds are tracked per disputed deposit, and every deposit amount is
    remembered for the lifetime of the run so it can be disputed later.
    """

    client_id: ClientId
    available: Decimal = ZERO
    held: Dict[TransactionId, Decimal] = field(default_factory=dict)
    deposit_ledger: Dict[TransactionId, Decimal] = field(default_factory=dict)
    locked: bool = False

    @property
    @exact_arithmetic
    def held_amount(self) -> Decimal:
        return sum(self.held.values(), ZERO)

    @property
    @exact_arithmetic
    def total(self) -> Decimal:
        return self.available + self.held_amount

    @exact_arithmetic
    def deposit(self, transaction_id: TransactionId, amount: Decimal) -> ProcessingResult:
        self.available += amount
        self.deposit_ledger[transaction_id] = amount
        return ProcessingResult.APPLIED

    @exact_arithmetic
    def withdraw(self, amount: Decimal) -> ProcessingResult:
        if amount > self.available:
            return ProcessingResult.IGNORED_INSUFFICIENT_FUNDS
        self.available -= amount
        return ProcessingResult.APPLIED

    @exact_arithmetic
    def dispute(self, transaction_id: TransactionId) -> ProcessingResult:
        amount = self.deposit_ledger.get(transaction_id)
        if amount is None:
            return ProcessingResult.IGNORED_UNKNOWN_TRANSACTION
        # available may go negative: the disputed funds can already be spent
        self.available -= amount
        self.held[transaction_id] = amount
        return ProcessingResult.APPLIED

    @exact_arithmetic
    def resolve(self, transaction_id: TransactionId) -> ProcessingResult:
        amount = self.held.pop(transaction_id, None)
        if amount is None:
            return ProcessingResult.IGNORED_NOT_HELD
        self.available += amount
        return ProcessingResult.APPLIED

    def chargeback(self, transaction_id: TransactionId) -> ProcessingResult:
        if self.held.pop(transaction_id, None) is None:
            return ProcessingResult.IGNORED_NOT_HELD
        self.locked = True
        return ProcessingResult.APPLIED

    @exact_arithmetic
    def summary(self) -> AccountSummary:
        held = self.held_amount
        return AccountSummary(
            client=self.client_id,
            available=self.available,
            held=held,
            total=self.available + held,
            locked=self.locked,
        )


class ProcessingStats:
    """Counters for applied and ignored events."""

    def __init__(self):
        self.applied = 0
        self.ignored = 0
        self.ignored_by_reason: Dict[ProcessingResult, int] = {}

    def record(self, result: ProcessingResult) -> None:
        if result.applied:
            self.applied += 1
            return
        self.ignored += 1
        self.ignored_by_reason[result] = self.ignored_by_reason.get(result, 0) + 1

    @property
    def processed(self) -> int:
        return self.applied + self.ignored

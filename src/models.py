from collections import Counter
from dataclasses import dataclass, field
from enum import Enum
from typing import ClassVar, Mapping, Optional, Union

from checked_decimal import ZERO, CheckedDecimal
from errors import EngineError, NegativeResultError, RejectionKind, ValidationError

MAX_CLIENT_ID = 2 ** 16 - 1
MAX_TRANSACTION_ID = 2 ** 32 - 1


class TransactionType(Enum):
    DEPOSIT = "deposit"
    WITHDRAWAL = "withdrawal"
    DISPUTE = "dispute"
    RESOLVE = "resolve"
    CHARGEBACK = "chargeback"


class ProcessingResult(Enum):
    ACCEPTED = "accepted"
    REJECTED = "rejected"


@dataclass(frozen=True)
class Deposit:
    client_id: int
    tx_id: int
    amount: CheckedDecimal
    kind: ClassVar[TransactionType] = TransactionType.DEPOSIT


@dataclass(frozen=True)
class Withdrawal:
    client_id: int
    tx_id: int
    amount: CheckedDecimal
    kind: ClassVar[TransactionType] = TransactionType.WITHDRAWAL


@dataclass(frozen=True)
class Dispute:
    client_id: int
    tx_id: int
    kind: ClassVar[TransactionType] = TransactionType.DISPUTE


@dataclass(frozen=True)
class Resolve:
    client_id: int
    tx_id: int
    kind: ClassVar[TransactionType] = TransactionType.RESOLVE


@dataclass(frozen=True)
class Chargeback:
    client_id: int
    tx_id: int
    kind: ClassVar[TransactionType] = TransactionType.CHARGEBACK


Transaction = Union[Deposit, Withdrawal, Dispute, Resolve, Chargeback]


def parse_transaction(row: Mapping[str, Optional[str]]) -> Transaction:
    """
    Validate one raw input row into a Transaction.

    Expects the keys type, client, tx and (for deposits/withdrawals) amount.
    Whitespace and letter case in the type are tolerated. Raises ValidationError,
    never touches any engine state.
    """
    type_str = _required(row, "type").lower()
    try:
        transaction_type = TransactionType(type_str)
    except ValueError:
        raise ValidationError(f"Unknown transaction type: {type_str!r}")

    client_id = _parse_id(row, "client", MAX_CLIENT_ID)
    tx_id = _parse_id(row, "tx", MAX_TRANSACTION_ID)

    match transaction_type:
        case TransactionType.DEPOSIT:
            return Deposit(client_id, tx_id, _parse_amount(row, client_id, tx_id))
        case TransactionType.WITHDRAWAL:
            return Withdrawal(client_id, tx_id, _parse_amount(row, client_id, tx_id))
        case TransactionType.DISPUTE:
            return Dispute(client_id, tx_id)
        case TransactionType.RESOLVE:
            return Resolve(client_id, tx_id)
        case TransactionType.CHARGEBACK:
            return Chargeback(client_id, tx_id)


def _required(row: Mapping[str, Optional[str]], name: str) -> str:
    value = row.get(name)
    if value is None or not value.strip():
        raise ValidationError(f"Missing field: {name}")
    return value.strip()


def _parse_id(row: Mapping[str, Optional[str]], name: str, max_value: int) -> int:
    text = _required(row, name)
    try:
        value = int(text)
    except ValueError:
        raise ValidationError(f"Invalid {name} id: {text!r}")
    if not (0 <= value <= max_value):
        raise ValidationError(f"{name} id out of range: {value}")
    return value


def _parse_amount(row: Mapping[str, Optional[str]], client_id: int, tx_id: int) -> CheckedDecimal:
    text = row.get("amount")
    if text is None or not text.strip():
        raise ValidationError("Amount is required", tx_id, client_id)
    try:
        amount = CheckedDecimal.parse(text)
    except ValidationError as e:
        raise ValidationError(e.message, tx_id, client_id)
    if amount <= ZERO:
        raise ValidationError(f"Amount must be positive, got {amount}", tx_id, client_id)
    return amount


@dataclass(frozen=True)
class Balance:
    """
    Available and held funds of one account.

    Immutable: every operation returns a new Balance, so handlers can compute
    the full result before committing anything. Construction fails if either
    side is negative or the total is not representable.
    """

    available: CheckedDecimal = ZERO
    held: CheckedDecimal = ZERO

    def __post_init__(self):
        if self.available.is_negative() or self.held.is_negative():
            raise NegativeResultError(f"Negative balance: available={self.available}, held={self.held}")
        self.available.checked_add(self.held)

    @property
    def total(self) -> CheckedDecimal:
        return self.available.checked_add(self.held)

    def credit(self, amount: CheckedDecimal) -> "Balance":
        return Balance(self.available.checked_add(amount), self.held)

    def debit(self, amount: CheckedDecimal) -> "Balance":
        return Balance(self.available.checked_sub(amount), self.held)

    def hold(self, amount: CheckedDecimal) -> "Balance":
        return Balance(self.available.checked_sub(amount), self.held.checked_add(amount))

    def release_hold(self, amount: CheckedDecimal) -> "Balance":
        return Balance(self.available.checked_add(amount), self.held.checked_sub(amount))

    def remove_held(self, amount: CheckedDecimal) -> "Balance":
        return Balance(self.available, self.held.checked_sub(amount))


@dataclass
class ClientAccount:
    client_id: int
    balance: Balance = field(default_factory=Balance)
    locked: bool = False

    @property
    def available(self) -> CheckedDecimal:
        return self.balance.available

    @property
    def held(self) -> CheckedDecimal:
        return self.balance.held

    @property
    def total(self) -> CheckedDecimal:
        return self.balance.total

    def commit(self, balance: Balance, locked: Optional[bool] = None) -> None:
        """Replace the balance (and optionally the lock state) in one step."""
        self.balance = balance
        if locked is not None:
            self.locked = locked


@dataclass(frozen=True)
class Outcome:
    transaction: Transaction
    result: ProcessingResult
    reason: Optional[EngineError] = None

    @classmethod
    def accept(cls, transaction: Transaction) -> "Outcome":
        return cls(transaction, ProcessingResult.ACCEPTED)

    @classmethod
    def reject(cls, transaction: Transaction, reason: EngineError) -> "Outcome":
        return cls(transaction, ProcessingResult.REJECTED, reason)

    @property
    def accepted(self) -> bool:
        return self.result == ProcessingResult.ACCEPTED


class ProcessingStats:
    """Counters for one run. Rejections are broken down by kind."""

    def __init__(self):
        self.processed = 0
        self.failed = 0
        self.invalid = 0
        self.failures_by_kind: Counter = Counter()

    def record_success(self):
        self.processed += 1

    def record_failure(self, kind: RejectionKind):
        self.failed += 1
        self.failures_by_kind[kind] += 1

    def record_invalid(self):
        self.invalid += 1
        self.failures_by_kind[RejectionKind.VALIDATION_ERROR] += 1

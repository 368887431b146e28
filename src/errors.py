from enum import Enum
from typing import Optional


class RejectionKind(Enum):
    VALIDATION_ERROR = "validation_error"
    DUPLICATE_TRANSACTION = "duplicate_transaction"
    UNKNOWN_TRANSACTION = "unknown_transaction"
    ACCOUNT_MISMATCH = "account_mismatch"
    ALREADY_DISPUTED = "already_disputed"
    NOT_DISPUTED = "not_disputed"
    ALREADY_CHARGED_BACK = "already_charged_back"
    INSUFFICIENT_FUNDS = "insufficient_funds"
    ACCOUNT_LOCKED = "account_locked"
    OVERFLOW = "overflow"
    UNDERFLOW = "underflow"
    NEGATIVE_RESULT = "negative_result"


class EngineError(Exception):
    """
    Base error for a rejected transaction.
    Carries a structured reason so callers can report it without parsing the message.
    """

    kind: RejectionKind

    def __init__(self, message: str, tx_id: Optional[int] = None, client_id: Optional[int] = None):
        self.message = message
        self.tx_id = tx_id
        self.client_id = client_id
        super().__init__(message)

    def __repr__(self) -> str:
        return f"{type(self).__name__}({self.kind.value}, client={self.client_id}, tx={self.tx_id}: {self.message})"


class InputFormatError(Exception):
    """Input source cannot be used at all (e.g. missing CSV header)."""


class ValidationError(EngineError):
    kind = RejectionKind.VALIDATION_ERROR


class DuplicateTransactionError(EngineError):
    kind = RejectionKind.DUPLICATE_TRANSACTION

    def __init__(self, tx_id: int, client_id: Optional[int] = None):
        super().__init__(f"Duplicate transaction ID: {tx_id}", tx_id, client_id)


class UnknownTransactionError(EngineError):
    kind = RejectionKind.UNKNOWN_TRANSACTION

    def __init__(self, tx_id: int, client_id: Optional[int] = None):
        super().__init__(f"Deposit not found: {tx_id}", tx_id, client_id)


class AccountMismatchError(EngineError):
    kind = RejectionKind.ACCOUNT_MISMATCH

    def __init__(self, tx_id: int, client_id: int, owner_id: int):
        self.owner_id = owner_id
        super().__init__(
            f"Transaction {tx_id} belongs to client {owner_id}, not client {client_id}",
            tx_id,
            client_id,
        )


class AlreadyDisputedError(EngineError):
    kind = RejectionKind.ALREADY_DISPUTED

    def __init__(self, tx_id: int, client_id: Optional[int] = None):
        super().__init__(f"Dispute already started for transaction ID: {tx_id}", tx_id, client_id)


class NotDisputedError(EngineError):
    kind = RejectionKind.NOT_DISPUTED

    def __init__(self, tx_id: int, client_id: Optional[int] = None):
        super().__init__(f"Dispute not started for transaction ID: {tx_id}", tx_id, client_id)


class AlreadyChargedBackError(EngineError):
    kind = RejectionKind.ALREADY_CHARGED_BACK

    def __init__(self, tx_id: int, client_id: Optional[int] = None):
        super().__init__(f"Transaction already charged back: {tx_id}", tx_id, client_id)


class InsufficientFundsError(EngineError):
    kind = RejectionKind.INSUFFICIENT_FUNDS

    def __init__(self, required, available, tx_id: Optional[int] = None, client_id: Optional[int] = None):
        super().__init__(
            f"Insufficient funds: required {required}, available {available}",
            tx_id,
            client_id,
        )


class AccountLockedError(EngineError):
    kind = RejectionKind.ACCOUNT_LOCKED

    def __init__(self, client_id: int, tx_id: Optional[int] = None):
        super().__init__(f"Account is locked: {client_id}", tx_id, client_id)


class DecimalOverflowError(EngineError):
    kind = RejectionKind.OVERFLOW

    def __init__(self, message: str = "Decimal overflow during operation"):
        super().__init__(message)


class DecimalUnderflowError(EngineError):
    kind = RejectionKind.UNDERFLOW

    def __init__(self, message: str = "Decimal underflow during operation"):
        super().__init__(message)


class NegativeResultError(EngineError):
    kind = RejectionKind.NEGATIVE_RESULT

    def __init__(self, message: str = "Operation would produce a negative balance"):
        super().__init__(message)

from dataclasses import dataclass
from enum import Enum
from typing import Dict, Set

from checked_decimal import CheckedDecimal
from errors import (
    AlreadyChargedBackError,
    AlreadyDisputedError,
    DuplicateTransactionError,
    NotDisputedError,
    UnknownTransactionError,
)


class DisputeStatus(Enum):
    NOT_DISPUTED = "not_disputed"
    DISPUTED = "disputed"
    CHARGED_BACK = "charged_back"


@dataclass
class DepositEntry:
    tx_id: int
    client_id: int
    amount: CheckedDecimal
    status: DisputeStatus = DisputeStatus.NOT_DISPUTED

    @property
    def disputed(self) -> bool:
        return self.status == DisputeStatus.DISPUTED

    @property
    def charged_back(self) -> bool:
        return self.status == DisputeStatus.CHARGED_BACK


class DepositLedger:
    """
    Append-only index of accepted deposits, keyed by transaction id.
    Also remembers accepted withdrawal ids so a tx id is never reused.
    Entries are never removed; a charged-back entry is terminal.
    """

    def __init__(self):
        self._deposits: Dict[int, DepositEntry] = {}
        self._withdrawal_ids: Set[int] = set()

    def __len__(self) -> int:
        return len(self._deposits)

    def contains(self, tx_id: int) -> bool:
        """True if tx_id was already used by an accepted deposit or withdrawal."""
        return tx_id in self._deposits or tx_id in self._withdrawal_ids

    def record(self, entry: DepositEntry) -> None:
        if self.contains(entry.tx_id):
            raise DuplicateTransactionError(entry.tx_id, entry.client_id)
        self._deposits[entry.tx_id] = entry

    def record_withdrawal(self, tx_id: int) -> None:
        if self.contains(tx_id):
            raise DuplicateTransactionError(tx_id)
        self._withdrawal_ids.add(tx_id)

    def lookup(self, tx_id: int) -> DepositEntry:
        entry = self._deposits.get(tx_id)
        if entry is None:
            raise UnknownTransactionError(tx_id)
        return entry

    def mark_disputed(self, tx_id: int) -> None:
        entry = self.lookup(tx_id)
        if entry.disputed:
            raise AlreadyDisputedError(tx_id, entry.client_id)
        if entry.charged_back:
            raise AlreadyChargedBackError(tx_id, entry.client_id)
        entry.status = DisputeStatus.DISPUTED

    def mark_resolved(self, tx_id: int) -> None:
        entry = self.lookup(tx_id)
        if not entry.disputed:
            raise NotDisputedError(tx_id, entry.client_id)
        entry.status = DisputeStatus.NOT_DISPUTED

    def mark_chargedback(self, tx_id: int) -> None:
        entry = self.lookup(tx_id)
        if entry.charged_back:
            raise AlreadyChargedBackError(tx_id, entry.client_id)
        entry.status = DisputeStatus.CHARGED_BACK

import logging
from typing import Optional

from account_store import AccountStore
from errors import (
    AccountLockedError,
    AccountMismatchError,
    AlreadyChargedBackError,
    AlreadyDisputedError,
    DuplicateTransactionError,
    EngineError,
    InsufficientFundsError,
    NotDisputedError,
)
from ledger import DepositEntry, DepositLedger
from models import (
    Chargeback,
    ClientAccount,
    Deposit,
    Dispute,
    Outcome,
    Resolve,
    Transaction,
    Withdrawal,
)

logger = logging.getLogger(__name__)


class TransactionProcessor:
    """
    Applies transactions, one at a time, to the account store and deposit ledger.

    Every handler follows validate-then-commit: new balances are computed as
    immutable values and all preconditions are checked first, then the ledger
    and account are written together. A handler that raises has changed nothing.
    """

    def __init__(self, accounts: Optional[AccountStore] = None, ledger: Optional[DepositLedger] = None):
        self._accounts = accounts if accounts is not None else AccountStore()
        self._ledger = ledger if ledger is not None else DepositLedger()

    @property
    def accounts(self) -> AccountStore:
        return self._accounts

    @property
    def ledger(self) -> DepositLedger:
        return self._ledger

    def process_transaction(self, transaction: Transaction) -> Outcome:
        """
        Process a single transaction.

        Returns an accepted Outcome, or a rejected one whose reason is the
        EngineError that stopped it. Never raises EngineError.
        """
        try:
            self._apply(transaction)
        except EngineError as e:
            if e.tx_id is None:
                e.tx_id = transaction.tx_id
            if e.client_id is None:
                e.client_id = transaction.client_id
            logger.debug(f"Rejected {transaction}: {e.message}")
            return Outcome.reject(transaction, e)
        return Outcome.accept(transaction)

    def _apply(self, transaction: Transaction) -> None:
        account = self._accounts.get_or_create(transaction.client_id)

        if account.locked:
            raise AccountLockedError(account.client_id, transaction.tx_id)

        match transaction:
            case Deposit():
                self._handle_deposit(account, transaction)
            case Withdrawal():
                self._handle_withdrawal(account, transaction)
            case Dispute():
                self._handle_dispute(account, transaction)
            case Resolve():
                self._handle_resolve(account, transaction)
            case Chargeback():
                self._handle_chargeback(account, transaction)
            case _:
                raise TypeError(f"Unsupported transaction: {transaction!r}")

    def _handle_deposit(self, account: ClientAccount, transaction: Deposit) -> None:
        balance = account.balance.credit(transaction.amount)
        self._ledger.record(DepositEntry(transaction.tx_id, transaction.client_id, transaction.amount))
        account.commit(balance)

    def _handle_withdrawal(self, account: ClientAccount, transaction: Withdrawal) -> None:
        if self._ledger.contains(transaction.tx_id):
            raise DuplicateTransactionError(transaction.tx_id)

        if account.available < transaction.amount:
            raise InsufficientFundsError(transaction.amount, account.available)

        balance = account.balance.debit(transaction.amount)
        self._ledger.record_withdrawal(transaction.tx_id)
        account.commit(balance)

    def _handle_dispute(self, account: ClientAccount, transaction: Dispute) -> None:
        entry = self._lookup_deposit(transaction)

        if entry.disputed:
            raise AlreadyDisputedError(entry.tx_id)
        if entry.charged_back:
            raise AlreadyChargedBackError(entry.tx_id)

        # A dispute may not push available below zero, even if the funds were already withdrawn.
        if account.available < entry.amount:
            raise InsufficientFundsError(entry.amount, account.available)

        balance = account.balance.hold(entry.amount)
        self._ledger.mark_disputed(entry.tx_id)
        account.commit(balance)

    def _handle_resolve(self, account: ClientAccount, transaction: Resolve) -> None:
        entry = self._lookup_deposit(transaction)

        if not entry.disputed:
            raise NotDisputedError(entry.tx_id)

        balance = account.balance.release_hold(entry.amount)
        self._ledger.mark_resolved(entry.tx_id)
        account.commit(balance)

    def _handle_chargeback(self, account: ClientAccount, transaction: Chargeback) -> None:
        entry = self._lookup_deposit(transaction)

        if entry.charged_back:
            raise AlreadyChargedBackError(entry.tx_id)

        if entry.disputed:
            balance = account.balance.remove_held(entry.amount)
        else:
            # Chargeback without a dispute: lock only, balances stay as they are.
            logger.info(f"Chargeback for tx {entry.tx_id} without an open dispute, locking client {account.client_id}")
            balance = account.balance

        self._ledger.mark_chargedback(entry.tx_id)
        account.commit(balance, locked=True)

    def _lookup_deposit(self, transaction: Transaction) -> DepositEntry:
        entry = self._ledger.lookup(transaction.tx_id)
        if entry.client_id != transaction.client_id:
            raise AccountMismatchError(entry.tx_id, transaction.client_id, entry.client_id)
        return entry

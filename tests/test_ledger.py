import sys
import os

import pytest

sys.path.insert(0, os.path.join(os.path.dirname(__file__), "..", "src"))

from checked_decimal import CheckedDecimal
from errors import (
    AlreadyChargedBackError,
    AlreadyDisputedError,
    DuplicateTransactionError,
    NotDisputedError,
    UnknownTransactionError,
)
from ledger import DepositEntry, DepositLedger, DisputeStatus


class TestDepositLedger:
    def setup_method(self):
        self.ledger = DepositLedger()
        self.ledger.record(DepositEntry(tx_id=1, client_id=7, amount=CheckedDecimal("10")))

    def test_record_and_lookup(self):
        entry = self.ledger.lookup(1)
        assert entry.client_id == 7
        assert entry.amount == CheckedDecimal("10")
        assert entry.status == DisputeStatus.NOT_DISPUTED
        assert not entry.disputed
        assert len(self.ledger) == 1

    def test_duplicate_deposit_rejected(self):
        with pytest.raises(DuplicateTransactionError):
            self.ledger.record(DepositEntry(tx_id=1, client_id=8, amount=CheckedDecimal("5")))
        assert self.ledger.lookup(1).client_id == 7

    def test_withdrawal_ids_share_the_id_space(self):
        self.ledger.record_withdrawal(2)
        assert self.ledger.contains(2)

        with pytest.raises(DuplicateTransactionError):
            self.ledger.record_withdrawal(1)
        with pytest.raises(DuplicateTransactionError):
            self.ledger.record_withdrawal(2)
        with pytest.raises(DuplicateTransactionError):
            self.ledger.record(DepositEntry(tx_id=2, client_id=7, amount=CheckedDecimal("1")))

    def test_withdrawals_are_not_disputable_entries(self):
        self.ledger.record_withdrawal(2)
        with pytest.raises(UnknownTransactionError):
            self.ledger.lookup(2)

    def test_lookup_unknown(self):
        with pytest.raises(UnknownTransactionError) as exc_info:
            self.ledger.lookup(99)
        assert exc_info.value.tx_id == 99

    def test_dispute_resolve_cycle(self):
        self.ledger.mark_disputed(1)
        assert self.ledger.lookup(1).disputed

        self.ledger.mark_resolved(1)
        assert self.ledger.lookup(1).status == DisputeStatus.NOT_DISPUTED

        # A resolved deposit can be disputed again
        self.ledger.mark_disputed(1)
        assert self.ledger.lookup(1).disputed

    def test_double_dispute_rejected(self):
        self.ledger.mark_disputed(1)
        with pytest.raises(AlreadyDisputedError):
            self.ledger.mark_disputed(1)
        assert self.ledger.lookup(1).disputed

    def test_resolve_without_dispute_rejected(self):
        with pytest.raises(NotDisputedError):
            self.ledger.mark_resolved(1)

    def test_chargeback_is_terminal(self):
        self.ledger.mark_disputed(1)
        self.ledger.mark_chargedback(1)
        entry = self.ledger.lookup(1)
        assert entry.charged_back
        assert not entry.disputed

        with pytest.raises(AlreadyChargedBackError):
            self.ledger.mark_chargedback(1)
        with pytest.raises(AlreadyChargedBackError):
            self.ledger.mark_disputed(1)
        with pytest.raises(NotDisputedError):
            self.ledger.mark_resolved(1)

    def test_chargeback_without_dispute(self):
        self.ledger.mark_chargedback(1)
        assert self.ledger.lookup(1).charged_back

    def test_transitions_on_unknown_entry(self):
        with pytest.raises(UnknownTransactionError):
            self.ledger.mark_disputed(5)
        with pytest.raises(UnknownTransactionError):
            self.ledger.mark_resolved(5)
        with pytest.raises(UnknownTransactionError):
            self.ledger.mark_chargedback(5)

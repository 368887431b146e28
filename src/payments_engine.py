import csv
import logging
from typing import Callable, Dict, Iterable, Optional, TextIO

from errors import EngineError, InputFormatError, ValidationError
from models import ClientAccount, Outcome, ProcessingStats, Transaction, parse_transaction
from transaction_processor import TransactionProcessor

logger = logging.getLogger(__name__)

REQUIRED_COLUMNS = ("type", "client", "tx")

RejectionHook = Callable[[EngineError, Optional[int]], None]


class PaymentsEngine:
    """
    Drives a run: reads transactions in input order and applies each one before
    reading the next. A rejected transaction is counted (and reported when
    verbose) but never stops the run.
    """

    def __init__(self, verbose: bool = False, on_reject: Optional[RejectionHook] = None):
        self._verbose = verbose
        self._on_reject = on_reject
        self._processor = TransactionProcessor()
        self._stats = ProcessingStats()

    @property
    def stats(self) -> ProcessingStats:
        return self._stats

    @property
    def processor(self) -> TransactionProcessor:
        return self._processor

    def process_file(self, filepath: str) -> Dict[int, ClientAccount]:
        """Process CSV file and return final account states."""
        with open(filepath, "r", newline="", encoding="utf-8-sig") as f:
            return self.process_stream(f)

    def process_stream(self, stream: TextIO) -> Dict[int, ClientAccount]:
        """Process CSV text with a header row and return final account states."""
        reader = csv.DictReader(stream, skipinitialspace=True)
        if reader.fieldnames is None:
            raise InputFormatError("Input is empty, expected a header row")
        reader.fieldnames = [name.lstrip("\ufeff").strip().lower() for name in reader.fieldnames]
        missing = [name for name in REQUIRED_COLUMNS if name not in reader.fieldnames]
        if missing:
            raise InputFormatError(f"Input header is missing columns: {', '.join(missing)}")

        for row in reader:
            self._process_row(row, reader.line_num)

        self._log_summary()
        return self.accounts

    def process(self, transactions: Iterable[Transaction]) -> Dict[int, ClientAccount]:
        """Apply already-validated transactions in order and return final account states."""
        for transaction in transactions:
            self.process_transaction(transaction)
        self._log_summary()
        return self.accounts

    def process_transaction(self, transaction: Transaction, line_number: Optional[int] = None) -> Outcome:
        outcome = self._processor.process_transaction(transaction)
        if outcome.accepted:
            self._stats.record_success()
        else:
            self._stats.record_failure(outcome.reason.kind)
            self._report_rejection(outcome.reason, line_number)
        return outcome

    @property
    def accounts(self) -> Dict[int, ClientAccount]:
        return self._processor.accounts.all_accounts()

    def _process_row(self, row: Dict[Optional[str], Optional[str]], line_number: int) -> None:
        try:
            transaction = parse_transaction(row)
        except ValidationError as e:
            self._stats.record_invalid()
            self._report_rejection(e, line_number)
            return
        self.process_transaction(transaction, line_number)

    def _report_rejection(self, error: EngineError, line_number: Optional[int]) -> None:
        if self._on_reject is not None:
            self._on_reject(error, line_number)
        if self._verbose:
            location = f" at line {line_number}" if line_number is not None else ""
            logger.warning(
                f"Transaction rejected{location}: client: {error.client_id}, tx: {error.tx_id}, "
                f"error: {error.kind.value}: {error.message}"
            )

    def _log_summary(self) -> None:
        logger.info(
            f"Processed: {self._stats.processed}, "
            f"Failed: {self._stats.failed}, "
            f"Invalid rows: {self._stats.invalid}"
        )

import logging
from typing import Dict, Iterable, Optional, TextIO

from account_writer import AccountWriter
from ledger import Ledger
from models import AccountSummary, ClientId, Transaction
from transaction_reader import TransactionReader

logger = logging.getLogger(__name__)


class PaymentsEngine:
    """
    Drives a single ledger: read transactions, apply them in order, write
    the resulting account summaries.

    Parse and I/O errors propagate to the caller and abort the run.
    """

    def __init__(self, ledger: Optional[Ledger] = None):
        self._ledger = ledger if ledger is not None else Ledger()

    @property
    def ledger(self) -> Ledger:
        return self._ledger

    def process(self, transactions: Iterable[Transaction]) -> None:
        for transaction in transactions:
            self._ledger.apply(transaction)

    def process_file(self, filepath: str) -> Dict[ClientId, AccountSummary]:
        """Process CSV file and return final account summaries."""
        logger.info(f"Processing transactions from {filepath}")
        with TransactionReader.from_path(filepath) as reader:
            self.process(reader)

        stats = self._ledger.stats
        logger.info(
            f"Processed: {stats.processed}, "
            f"Applied: {stats.applied}, "
            f"Ignored: {stats.ignored}"
        )
        for reason, count in stats.ignored_by_reason.items():
            logger.info(f"  {reason.value}: {count}")

        return {summary.client: summary for summary in self._ledger.snapshot()}

    def write(self, output: TextIO) -> None:
        """Write all account summaries, ordered by client id."""
        summaries = sorted(self._ledger.snapshot(), key=lambda summary: summary.client)
        AccountWriter(output).write_all(summaries)


def run(filepath: str, output: TextIO) -> None:
    engine = PaymentsEngine()
    engine.process_file(filepath)
    engine.write(output)

import logging
from typing import Dict, Iterator, assert_never

from models import (
    AccountSummary,
    ClientAccount,
    ClientId,
    ProcessingResult,
    ProcessingStats,
    Transaction,
    TransactionType,
)

logger = logging.getLogger(__name__)


class Ledger:
    """
    Account state machine.

    Owns every client account and applies transactions one at a time in
    arrival order. Business-rule violations (insufficient funds, unknown or
    non-held transaction, locked account) are no-ops, never errors.
    """

    def __init__(self):
        self._accounts: Dict[ClientId, ClientAccount] = {}
        self._stats = ProcessingStats()

    @property
    def stats(self) -> ProcessingStats:
        return self._stats

    def get_or_create_account(self, client_id: ClientId) -> ClientAccount:
        """Get existing account or create new one."""
        if client_id not in self._accounts:
            self._accounts[client_id] = ClientAccount(client_id=client_id)
        return self._accounts[client_id]

    def apply(self, transaction: Transaction) -> None:
        """Apply a single transaction to the account it addresses."""
        result = self._process_transaction(transaction)
        self._stats.record(result)
        if not result.applied:
            logger.debug(f"{transaction}: {result.value}")

    def _process_transaction(self, transaction: Transaction) -> ProcessingResult:
        account = self.get_or_create_account(transaction.client_id)

        if account.locked:
            return ProcessingResult.IGNORED_LOCKED

        match transaction.transaction_type:
            case TransactionType.DEPOSIT:
                return account.deposit(transaction.transaction_id, transaction.amount)
            case TransactionType.WITHDRAWAL:
                return account.withdraw(transaction.amount)
            case TransactionType.DISPUTE:
                return account.dispute(transaction.transaction_id)
            case TransactionType.RESOLVE:
                return account.resolve(transaction.transaction_id)
            case TransactionType.CHARGEBACK:
                return account.chargeback(transaction.transaction_id)
            case _ as unreachable:
                assert_never(unreachable)

    def snapshot(self) -> Iterator[AccountSummary]:
        """Yield a summary of every known account. Order is not meaningful."""
        return (account.summary() for account in self._accounts.values())

    def __len__(self) -> int:
        return len(self._accounts)

    def __contains__(self, client_id: ClientId) -> bool:
        return client_id in self._accounts

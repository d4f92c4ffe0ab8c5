import logging
from typing import Dict, List, Optional

from models import (
    ClientAccount,
    ClientSnapshot,
    ProcessingResult,
    Transaction,
    TransactionRecord,
    TransactionState,
    TransactionType,
)

logger = logging.getLogger(__name__)


class Ledger:
    """
    Client accounts plus the deposit/withdrawal history needed to settle disputes.

    Every handler validates before it mutates, so a rejected transaction
    leaves balances, lock status and transaction states untouched.
    """

    def __init__(self):
        self._accounts: Dict[int, ClientAccount] = {}
        self._transactions: Dict[int, TransactionRecord] = {}

    def apply(self, transaction: Transaction) -> ProcessingResult:
        """
        Apply a single transaction.

        Returns:
            SUCCESS if the transaction changed the ledger, otherwise the
            reason it was rejected.
        """
        account = self.get_or_create_account(transaction.client_id)

        match transaction.transaction_type:
            case TransactionType.DEPOSIT:
                return self._handle_deposit(account, transaction)
            case TransactionType.WITHDRAWAL:
                return self._handle_withdrawal(account, transaction)
            case TransactionType.DISPUTE:
                return self._handle_dispute(account, transaction)
            case TransactionType.RESOLVE:
                return self._handle_resolve(account, transaction)
            case TransactionType.CHARGEBACK:
                return self._handle_chargeback(account, transaction)

    def get_or_create_account(self, client_id: int) -> ClientAccount:
        """Get existing account or create new one."""
        if client_id not in self._accounts:
            self._accounts[client_id] = ClientAccount(client_id=client_id)
        return self._accounts[client_id]

    def get_account(self, client_id: int) -> Optional[ClientAccount]:
        return self._accounts.get(client_id)

    def get_transaction(self, transaction_id: int) -> Optional[TransactionRecord]:
        return self._transactions.get(transaction_id)

    def accounts(self) -> List[ClientAccount]:
        """All accounts in the order their clients first appeared."""
        return list(self._accounts.values())

    def snapshot(self) -> List[ClientSnapshot]:
        """Final state of every known client, ordered by client id."""
        return [ClientSnapshot.from_account(self._accounts[client_id]) for client_id in sorted(self._accounts)]

    def _check_new_funds_movement(self, transaction: Transaction) -> ProcessingResult:
        if transaction.amount is None:
            return ProcessingResult.MISSING_AMOUNT
        if transaction.amount <= 0:
            return ProcessingResult.INVALID_AMOUNT
        if transaction.transaction_id in self._transactions:
            return ProcessingResult.DUPLICATE_TRANSACTION
        return ProcessingResult.SUCCESS

    def _handle_deposit(self, account: ClientAccount, transaction: Transaction) -> ProcessingResult:
        result = self._check_new_funds_movement(transaction)
        if not result.succeeded:
            logger.debug(f"Deposit tx {transaction.transaction_id}: {result.value} (amount {transaction.amount})")
            return result

        account.credit(transaction.amount)
        self._record(transaction)
        return ProcessingResult.SUCCESS

    def _handle_withdrawal(self, account: ClientAccount, transaction: Transaction) -> ProcessingResult:
        result = self._check_new_funds_movement(transaction)
        if not result.succeeded:
            logger.debug(f"Withdrawal tx {transaction.transaction_id}: {result.value} (amount {transaction.amount})")
            return result

        if account.locked:
            return ProcessingResult.ACCOUNT_LOCKED

        if transaction.amount > account.available:
            logger.debug(
                f"Withdrawal tx {transaction.transaction_id}: requested {transaction.amount}, available {account.available}"
            )
            return ProcessingResult.INSUFFICIENT_FUNDS

        account.debit(transaction.amount)
        self._record(transaction)
        return ProcessingResult.SUCCESS

    def _handle_dispute(self, account: ClientAccount, transaction: Transaction) -> ProcessingResult:
        original = self._transactions.get(transaction.transaction_id)
        result = self._check_reference(original, transaction)
        if not result.succeeded:
            return result

        if not original.disputable:
            logger.debug(
                f"Dispute for tx {transaction.transaction_id}: got {original.transaction_type.value}, only deposits can be disputed"
            )
            return ProcessingResult.NOT_DISPUTABLE

        if original.state != TransactionState.APPLIED:
            logger.debug(f"Dispute for tx {transaction.transaction_id}: transaction is {original.state.value}")
            return ProcessingResult.NOT_APPLIED

        account.hold(original.amount)
        original.state = TransactionState.DISPUTED
        return ProcessingResult.SUCCESS

    def _handle_resolve(self, account: ClientAccount, transaction: Transaction) -> ProcessingResult:
        original = self._transactions.get(transaction.transaction_id)
        result = self._check_reference(original, transaction)
        if not result.succeeded:
            return result

        if original.state != TransactionState.DISPUTED:
            return ProcessingResult.NOT_DISPUTED

        account.release_hold(original.amount)
        # Back to applied, so it can be disputed again
        original.state = TransactionState.APPLIED
        return ProcessingResult.SUCCESS

    def _handle_chargeback(self, account: ClientAccount, transaction: Transaction) -> ProcessingResult:
        original = self._transactions.get(transaction.transaction_id)
        result = self._check_reference(original, transaction)
        if not result.succeeded:
            return result

        if original.state != TransactionState.DISPUTED:
            return ProcessingResult.NOT_DISPUTED

        account.remove_held(original.amount)
        account.locked = True
        original.state = TransactionState.CHARGED_BACK
        logger.info(f"Chargeback for tx {transaction.transaction_id}: client {account.client_id} locked")
        return ProcessingResult.SUCCESS

    def _check_reference(self, original: Optional[TransactionRecord], transaction: Transaction) -> ProcessingResult:
        if original is None:
            return ProcessingResult.TRANSACTION_NOT_FOUND

        if original.client_id != transaction.client_id:
            logger.debug(
                f"{transaction.transaction_type.value.capitalize()} for tx {transaction.transaction_id}: "
                f"client mismatch (expected {original.client_id}, got {transaction.client_id})"
            )
            return ProcessingResult.CLIENT_MISMATCH

        return ProcessingResult.SUCCESS

    def _record(self, transaction: Transaction) -> None:
        self._transactions[transaction.transaction_id] = TransactionRecord(
            transaction_type=transaction.transaction_type,
            client_id=transaction.client_id,
            amount=transaction.amount,
        )

from dataclasses import dataclass
from decimal import Decimal
from enum import Enum
from typing import Optional

DECIMAL_PLACES = 4
AMOUNT_QUANTUM = Decimal(1).scaleb(-DECIMAL_PLACES)


class TransactionType(Enum):
    DEPOSIT = "deposit"
    WITHDRAWAL = "withdrawal"
    DISPUTE = "dispute"
    RESOLVE = "resolve"
    CHARGEBACK = "chargeback"


class TransactionState(Enum):
    APPLIED = "applied"
    DISPUTED = "disputed"
    CHARGED_BACK = "charged_back"


class ProcessingResult(Enum):
    """Outcome of applying one transaction. Anything but SUCCESS is a rejection."""

    SUCCESS = "success"
    MISSING_AMOUNT = "missing amount"
    INVALID_AMOUNT = "amount must be positive"
    DUPLICATE_TRANSACTION = "transaction id already used"
    INSUFFICIENT_FUNDS = "insufficient available funds"
    ACCOUNT_LOCKED = "account is locked"
    TRANSACTION_NOT_FOUND = "referenced transaction not found"
    CLIENT_MISMATCH = "referenced transaction belongs to another client"
    NOT_DISPUTABLE = "only deposits can be disputed"
    NOT_APPLIED = "referenced transaction is already disputed or charged back"
    NOT_DISPUTED = "referenced transaction is not under dispute"

    @property
    def succeeded(self) -> bool:
        return self is ProcessingResult.SUCCESS


@dataclass
class Transaction:
    transaction_type: TransactionType
    client_id: int
    transaction_id: int
    amount: Optional[Decimal] = None

    def __repr__(self) -> str:
        return f"Transaction({self.transaction_type.value}, client={self.client_id}, tx={self.transaction_id}, amount={self.amount})"


@dataclass
class TransactionRecord:
    """Applied deposit or withdrawal, kept so later disputes can refer to it."""

    transaction_type: TransactionType
    client_id: int
    amount: Decimal
    state: TransactionState = TransactionState.APPLIED

    @property
    def disputable(self) -> bool:
        return self.transaction_type == TransactionType.DEPOSIT


@dataclass
class ClientAccount:
    client_id: int
    available: Decimal = Decimal("0")
    held: Decimal = Decimal("0")
    locked: bool = False

    @property
    def total(self) -> Decimal:
        return self.available + self.held

    def credit(self, amount: Decimal) -> None:
        self.available += amount

    def debit(self, amount: Decimal) -> None:
        self.available -= amount

    def hold(self, amount: Decimal) -> None:
        self.available -= amount
        self.held += amount

    def release_hold(self, amount: Decimal) -> None:
        self.held -= amount
        self.available += amount

    def remove_held(self, amount: Decimal) -> None:
        self.held -= amount


@dataclass(frozen=True)
class ClientSnapshot:
    client_id: int
    available: Decimal
    held: Decimal
    total: Decimal
    locked: bool

    @classmethod
    def from_account(cls, account: ClientAccount) -> "ClientSnapshot":
        return cls(
            client_id=account.client_id,
            available=account.available,
            held=account.held,
            total=account.total,
            locked=account.locked,
        )


@dataclass(frozen=True)
class Rejection:
    transaction: Transaction
    reason: ProcessingResult

    def __str__(self) -> str:
        return (
            f"Rejected {self.transaction.transaction_type.value} tx {self.transaction.transaction_id} "
            f"for client {self.transaction.client_id}: {self.reason.value}"
        )

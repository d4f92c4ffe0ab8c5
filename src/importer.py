import csv
import logging
from decimal import Decimal, InvalidOperation
from typing import Dict, Iterator, Optional, TextIO

from errors import TransactionSourceError
from models import AMOUNT_QUANTUM, Transaction, TransactionType

logger = logging.getLogger(__name__)

REQUIRED_COLUMNS = ("type", "client", "tx")
AMOUNT_COLUMN = "amount"
AMOUNT_TYPES = (TransactionType.DEPOSIT, TransactionType.WITHDRAWAL)


def parse_amount(amount_str: str) -> Decimal:
    """Parse an amount that stays representable at four decimal places. Raises ValueError otherwise."""
    try:
        amount = Decimal(amount_str)
        if amount.is_finite():
            amount.quantize(AMOUNT_QUANTUM)
            return amount
    except InvalidOperation:
        pass
    raise ValueError(f"invalid amount {amount_str!r}")


def parse_csv_row(row: Dict[str, Optional[str]]) -> Transaction:
    """
    Parse a CSV row into a Transaction.

    Raises KeyError or ValueError when the row cannot describe a transaction.
    An empty amount is left as None for the ledger to judge. Amounts on
    dispute, resolve and chargeback rows are ignored.
    """
    normalized = {k.strip(): (v or "").strip() for k, v in row.items() if k is not None}

    transaction_type = TransactionType(normalized["type"].lower())
    client_id = int(normalized["client"])
    transaction_id = int(normalized["tx"])

    amount = None
    amount_str = normalized.get(AMOUNT_COLUMN, "")
    if amount_str and transaction_type in AMOUNT_TYPES:
        amount = parse_amount(amount_str)

    return Transaction(
        transaction_type=transaction_type,
        client_id=client_id,
        transaction_id=transaction_id,
        amount=amount,
    )


class CsvTransactionImporter:
    """
    Lazily reads transactions from CSV with a `type, client, tx, amount` header.

    Headers and values may carry surrounding whitespace. Rows that cannot be
    parsed are logged and skipped; a source that is not a transaction CSV at
    all raises TransactionSourceError.
    """

    def __init__(self, stream: TextIO, name: str = "<stream>"):
        self._stream = stream
        self._name = name
        self._reader = csv.DictReader(stream)
        self.skipped_rows = 0
        self._check_header()

    @classmethod
    def from_path(cls, filepath: str) -> "CsvTransactionImporter":
        try:
            stream = open(filepath, "r", newline="", encoding="utf-8-sig")
        except OSError as e:
            raise TransactionSourceError(f"Cannot read input file {filepath}: {e}") from e

        try:
            return cls(stream, name=filepath)
        except TransactionSourceError:
            stream.close()
            raise

    def __iter__(self) -> Iterator[Transaction]:
        try:
            for row in self._reader:
                try:
                    yield parse_csv_row(row)
                except (KeyError, ValueError) as e:
                    self.skipped_rows += 1
                    logger.warning(f"Skipping malformed row {self._reader.line_num} in {self._name}: {e}")
        except (csv.Error, UnicodeDecodeError) as e:
            raise TransactionSourceError(f"Cannot parse {self._name} near line {self._reader.line_num}: {e}") from e

    def close(self) -> None:
        self._stream.close()

    def __enter__(self) -> "CsvTransactionImporter":
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()

    def _check_header(self) -> None:
        try:
            fieldnames = self._reader.fieldnames
        except (csv.Error, UnicodeDecodeError) as e:
            raise TransactionSourceError(f"Cannot parse header of {self._name}: {e}") from e

        if not fieldnames:
            raise TransactionSourceError(f"Input {self._name} is empty")

        columns = {name.strip().lower() for name in fieldnames if name}
        missing = [column for column in REQUIRED_COLUMNS if column not in columns]
        if missing:
            raise TransactionSourceError(f"Input {self._name} is missing columns: {', '.join(missing)}")

        # Rows are keyed by the normalized names
        self._reader.fieldnames = [name.strip().lower() if name else name for name in fieldnames]

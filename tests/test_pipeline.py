import sys
import os
import logging
from decimal import Decimal

sys.path.insert(0, os.path.join(os.path.dirname(__file__), "..", "src"))

from ledger import Ledger
from models import ClientSnapshot, ProcessingResult, Transaction, TransactionType
from pipeline import process_transactions


def make_transaction(transaction_type, client_id, transaction_id, amount=None):
    return Transaction(
        transaction_type=transaction_type,
        client_id=client_id,
        transaction_id=transaction_id,
        amount=Decimal(amount) if amount is not None else None,
    )


class TestProcessTransactions:
    def test_dispute_then_resolve(self):
        report = process_transactions([
            make_transaction(TransactionType.DEPOSIT, 1, 1, "5"),
            make_transaction(TransactionType.DISPUTE, 1, 1),
            make_transaction(TransactionType.RESOLVE, 1, 1),
        ])

        assert report.snapshot() == [ClientSnapshot(1, Decimal("5"), Decimal("0"), Decimal("5"), False)]
        assert report.rejections == []

    def test_dispute_then_chargeback(self):
        report = process_transactions([
            make_transaction(TransactionType.DEPOSIT, 1, 1, "5"),
            make_transaction(TransactionType.DISPUTE, 1, 1),
            make_transaction(TransactionType.CHARGEBACK, 1, 1),
        ])

        assert report.snapshot() == [ClientSnapshot(1, Decimal("0"), Decimal("0"), Decimal("0"), True)]

    def test_rejections_collected_and_processing_continues(self):
        report = process_transactions([
            make_transaction(TransactionType.DEPOSIT, 1, 1, "10"),
            make_transaction(TransactionType.WITHDRAWAL, 1, 2, "50"),
            make_transaction(TransactionType.DEPOSIT, 2, 3, "7"),
            make_transaction(TransactionType.WITHDRAWAL, 1, 4, "4"),
        ])

        assert [(r.transaction.transaction_id, r.reason) for r in report.rejections] == [
            (2, ProcessingResult.INSUFFICIENT_FUNDS),
        ]
        assert report.stats.processed == 3
        assert report.stats.failed == 1
        snapshots = {s.client_id: s for s in report.snapshot()}
        assert snapshots[1].available == Decimal("6")
        assert snapshots[2].available == Decimal("7")

    def test_rejection_logged_as_warning(self, caplog):
        with caplog.at_level(logging.WARNING, logger="pipeline"):
            process_transactions([make_transaction(TransactionType.DISPUTE, 4, 42)])

        assert "tx 42" in caplog.text
        assert "client 4" in caplog.text
        assert ProcessingResult.TRANSACTION_NOT_FOUND.value in caplog.text

    def test_consumes_lazy_iterable_once(self):
        consumed = []

        def generate():
            for tx_id in range(1, 4):
                consumed.append(tx_id)
                yield make_transaction(TransactionType.DEPOSIT, 1, tx_id, "1")

        report = process_transactions(generate())

        assert consumed == [1, 2, 3]
        assert report.snapshot()[0].total == Decimal("3")

    def test_continues_existing_ledger(self):
        ledger = Ledger()
        process_transactions([make_transaction(TransactionType.DEPOSIT, 1, 1, "5")], ledger)
        report = process_transactions([make_transaction(TransactionType.DISPUTE, 1, 1)], ledger)

        assert report.ledger is ledger
        assert report.snapshot()[0].held == Decimal("5")

    def test_order_matters(self):
        report = process_transactions([
            make_transaction(TransactionType.DISPUTE, 1, 1),
            make_transaction(TransactionType.DEPOSIT, 1, 1, "100"),
        ])

        assert report.rejections[0].reason == ProcessingResult.TRANSACTION_NOT_FOUND
        assert report.snapshot() == [ClientSnapshot(1, Decimal("100"), Decimal("0"), Decimal("100"), False)]

    def test_empty_input(self):
        report = process_transactions([])

        assert report.snapshot() == []
        assert report.stats.processed == 0

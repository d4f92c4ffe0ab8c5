import logging
from typing import Optional, TextIO

from exporter import CsvStateExporter
from importer import CsvTransactionImporter
from ledger import Ledger
from pipeline import ProcessingReport, process_transactions

logger = logging.getLogger(__name__)


class PaymentsEngine:
    """
    Wires the CSV importer, the ledger and the CSV exporter together.
    Transactions are applied one at a time in file order.
    """

    def __init__(self, ledger: Optional[Ledger] = None):
        self._ledger = ledger if ledger is not None else Ledger()

    @property
    def ledger(self) -> Ledger:
        return self._ledger

    def process_file(self, filepath: str) -> ProcessingReport:
        """Process CSV file and return the report with final account states."""
        logger.info(f"Processing transactions from {filepath}")

        with CsvTransactionImporter.from_path(filepath) as importer:
            report = process_transactions(importer, self._ledger)

        if importer.skipped_rows:
            logger.warning(f"{importer.skipped_rows} malformed rows skipped in {filepath}")

        return report

    def run(self, filepath: str, output: TextIO) -> ProcessingReport:
        """Process CSV file and write the final client states to output."""
        report = self.process_file(filepath)
        written = CsvStateExporter(output).export(report.snapshot())
        logger.info(f"Wrote {written} client states")
        return report

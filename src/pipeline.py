import logging
from dataclasses import dataclass, field
from typing import Iterable, List, Optional

from ledger import Ledger
from models import ClientSnapshot, ProcessingResult, Rejection, Transaction

logger = logging.getLogger(__name__)


@dataclass
class ProcessingStats:
    """Counters for tracking processing statistics."""

    processed: int = 0
    failed: int = 0

    def record(self, result: ProcessingResult) -> None:
        if result.succeeded:
            self.processed += 1
        else:
            self.failed += 1


@dataclass
class ProcessingReport:
    ledger: Ledger
    rejections: List[Rejection] = field(default_factory=list)
    stats: ProcessingStats = field(default_factory=ProcessingStats)

    def snapshot(self) -> List[ClientSnapshot]:
        return self.ledger.snapshot()


def process_transactions(transactions: Iterable[Transaction], ledger: Optional[Ledger] = None) -> ProcessingReport:
    """
    Apply transactions to the ledger strictly in arrival order.

    The iterable is consumed once, lazily. Rejected transactions are logged,
    collected on the report and skipped; they never stop the run.
    """
    report = ProcessingReport(ledger=ledger if ledger is not None else Ledger())

    for transaction in transactions:
        result = report.ledger.apply(transaction)
        report.stats.record(result)

        if not result.succeeded:
            rejection = Rejection(transaction=transaction, reason=result)
            report.rejections.append(rejection)
            logger.warning(str(rejection))

    logger.info(f"Processed: {report.stats.processed}, Failed: {report.stats.failed}")
    return report

import csv
from decimal import ROUND_HALF_EVEN, Decimal
from typing import Iterable, TextIO

from errors import StateSinkError
from models import AMOUNT_QUANTUM, DECIMAL_PLACES, ClientSnapshot

HEADER = ("client", "available", "held", "total", "locked")


def format_decimal(value: Decimal) -> str:
    """Format decimal with exactly four decimal places in fixed notation."""
    quantized = value.quantize(AMOUNT_QUANTUM, rounding=ROUND_HALF_EVEN)
    # No signed zero in the output
    if quantized.is_zero():
        quantized = quantized.copy_abs()
    return f"{quantized:f}"


class CsvStateExporter:
    """Writes final client states as CSV rows."""

    def __init__(self, stream: TextIO):
        self._writer = csv.writer(stream, lineterminator="\n")

    def export(self, snapshots: Iterable[ClientSnapshot]) -> int:
        """Write the header and one row per client. Returns the number of rows written."""
        count = 0
        try:
            self._writer.writerow(HEADER)
            for snapshot in snapshots:
                self._writer.writerow(self._to_row(snapshot))
                count += 1
        except OSError as e:
            raise StateSinkError(f"Cannot write client states: {e}") from e
        return count

    @staticmethod
    def _to_row(snapshot: ClientSnapshot) -> tuple:
        return (
            snapshot.client_id,
            format_decimal(snapshot.available),
            format_decimal(snapshot.held),
            format_decimal(snapshot.total),
            str(snapshot.locked).lower(),
        )

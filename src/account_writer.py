import csv
from decimal import Decimal
from typing import Iterable, TextIO

from models import AccountSummary

FIELDNAMES = ["client", "available", "held", "total", "locked"]


def format_decimal(value: Decimal) -> str:
    """Format decimal without exponent, removing trailing zeros."""
    normalized = value.normalize()
    if normalized.is_zero():
        return "0"
    return f"{normalized:f}"


class AccountWriter:
    """Writes account summaries as CSV. The header is written exactly once."""

    def __init__(self, stream: TextIO):
        self._writer = csv.writer(stream, lineterminator="\n")
        self._header_written = False

    def write_header(self) -> None:
        if not self._header_written:
            self._writer.writerow(FIELDNAMES)
            self._header_written = True

    def write(self, summary: AccountSummary) -> None:
        self.write_header()
        self._writer.writerow([
            summary.client,
            format_decimal(summary.available),
            format_decimal(summary.held),
            format_decimal(summary.total),
            str(summary.locked).lower(),
        ])

    def write_all(self, summaries: Iterable[AccountSummary]) -> None:
        self.write_header()
        for summary in summaries:
            self.write(summary)

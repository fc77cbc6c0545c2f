import csv
import logging
from contextlib import contextmanager
from decimal import Decimal, InvalidOperation, ROUND_HALF_EVEN
from typing import Dict, Iterator, List, Optional, TextIO

from models import (
    AMOUNT_PRECISION,
    MAX_AMOUNT,
    MAX_CLIENT_ID,
    MAX_TRANSACTION_ID,
    Transaction,
    TransactionParseError,
    TransactionType,
)

logger = logging.getLogger(__name__)

REQUIRED_COLUMNS = ("type", "client", "tx")
AMOUNT_COLUMN = "amount"


class TransactionReader:
    """
    Reads transactions from CSV with a `type, client, tx, amount` header.

    Whitespace around headers and fields is ignored. Any malformed row
    raises TransactionParseError; the caller is expected to abort the run.
    """

    def __init__(self, stream: TextIO):
        self._reader = csv.reader(stream)
        self._columns: Optional[Dict[str, int]] = None

    @classmethod
    @contextmanager
    def from_path(cls, filepath: str) -> Iterator["TransactionReader"]:
        with open(filepath, "r", newline="", encoding="utf-8") as f:
            yield cls(f)

    def __iter__(self) -> Iterator[Transaction]:
        for row in self._rows():
            if not any(field.strip() for field in row):
                continue
            if self._columns is None:
                self._columns = self._parse_header(row, self._reader.line_num)
                continue
            yield self._parse_csv_row(row, self._reader.line_num)

    def _rows(self) -> Iterator[List[str]]:
        while True:
            try:
                row = next(self._reader)
            except StopIteration:
                return
            except csv.Error as e:
                raise TransactionParseError(f"malformed CSV: {e}", self._reader.line_num) from e
            except UnicodeDecodeError as e:
                # decoding runs ahead of the csv reader, so the failing line is not yet counted
                raise TransactionParseError(f"input is not valid UTF-8: {e}", self._reader.line_num + 1) from e
            yield row

    def _parse_header(self, row: List[str], line_number: int) -> Dict[str, int]:
        columns = {name.strip().lower(): index for index, name in enumerate(row)}
        missing = [name for name in REQUIRED_COLUMNS if name not in columns]
        if missing:
            raise TransactionParseError(f"header is missing columns {missing}", line_number, row)
        return columns

    def _parse_csv_row(self, row: List[str], line_number: int) -> Transaction:
        """Parse CSV row into Transaction."""
        if len(row) > len(self._columns):
            raise TransactionParseError(f"expected at most {len(self._columns)} fields, got {len(row)}", line_number, row)

        fields = [value.strip() for value in row]

        def field(name: str) -> str:
            index = self._columns.get(name)
            if index is None or index >= len(fields):
                return ""
            return fields[index]

        try:
            transaction_type = TransactionType(field("type").lower())
            client_id = _parse_bounded_int(field("client"), "client", MAX_CLIENT_ID)
            transaction_id = _parse_bounded_int(field("tx"), "tx", MAX_TRANSACTION_ID)

            amount = None
            amount_str = field(AMOUNT_COLUMN)
            if amount_str and transaction_type.requires_amount:
                amount = parse_amount(amount_str)

            return Transaction(
                transaction_type=transaction_type,
                client_id=client_id,
                transaction_id=transaction_id,
                amount=amount,
            )
        except ValueError as e:
            raise TransactionParseError(str(e), line_number, row) from e


def _parse_bounded_int(value: str, name: str, maximum: int) -> int:
    number = int(value)
    if not 0 <= number <= maximum:
        raise ValueError(f"{name} {number} out of range 0..{maximum}")
    return number


def parse_amount(value: str) -> Decimal:
    """Parse a decimal amount, rounded to four fractional digits and capped at MAX_AMOUNT."""
    try:
        amount = Decimal(value)
        if not amount.is_finite():
            raise InvalidOperation
        rounded = amount.quantize(AMOUNT_PRECISION, rounding=ROUND_HALF_EVEN)
    except InvalidOperation:
        raise ValueError(f"invalid amount {value!r}") from None
    if rounded > MAX_AMOUNT:
        raise ValueError(f"amount {value} exceeds maximum {MAX_AMOUNT}")
    if rounded != amount:
        logger.warning(f"Amount {value} rounded to {rounded}")
    return rounded

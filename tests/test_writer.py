import sys
import os
import io
from decimal import Decimal

sys.path.insert(0, os.path.join(os.path.dirname(__file__), "..", "src"))

from account_writer import AccountWriter, format_decimal
from models import AccountSummary


class TestFormatDecimal:
    def test_trailing_zeros_removed(self):
        assert format_decimal(Decimal("1.5000")) == "1.5"

    def test_integer_has_no_exponent(self):
        assert format_decimal(Decimal("100")) == "100"
        assert format_decimal(Decimal("1E+3")) == "1000"

    def test_zero(self):
        assert format_decimal(Decimal("0.0000")) == "0"
        assert format_decimal(Decimal("-0")) == "0"

    def test_negative(self):
        assert format_decimal(Decimal("-2.5000")) == "-2.5"

    def test_four_places(self):
        assert format_decimal(Decimal("0.0001")) == "0.0001"


class TestAccountWriter:
    def test_writes_header_and_rows(self):
        output = io.StringIO()
        writer = AccountWriter(output)
        writer.write_all([
            AccountSummary(1, Decimal("1.5"), Decimal("0"), Decimal("1.5"), False),
            AccountSummary(2, Decimal("0"), Decimal("0"), Decimal("0"), True),
        ])

        assert output.getvalue() == (
            "client,available,held,total,locked\n"
            "1,1.5,0,1.5,false\n"
            "2,0,0,0,true\n"
        )

    def test_header_only_when_empty(self):
        output = io.StringIO()
        AccountWriter(output).write_all([])

        assert output.getvalue() == "client,available,held,total,locked\n"

    def test_header_written_once(self):
        output = io.StringIO()
        writer = AccountWriter(output)
        summary = AccountSummary(1, Decimal("1"), Decimal("0"), Decimal("1"), False)
        writer.write(summary)
        writer.write_all([summary])

        assert output.getvalue().count("client,available") == 1
        assert output.getvalue().count("1,1,0,1,false") == 2

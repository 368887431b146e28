import sys
import os
import io
import logging

import pytest

sys.path.insert(0, os.path.join(os.path.dirname(__file__), "..", "src"))

from checked_decimal import CheckedDecimal
from main import format_decimal, main, parse_args, write_accounts
from models import Balance, ClientAccount


class TestFormatDecimal:
    @pytest.mark.parametrize("text, expected", [
        ("1.5", "1.5"),
        ("2", "2"),
        ("0", "0"),
        ("100", "100"),
        ("0.0001", "0.0001"),
        ("1234.5670", "1234.567"),
    ])
    def test_trailing_zeros_removed(self, text, expected):
        assert format_decimal(CheckedDecimal(text)) == expected

    def test_large_value_not_in_exponent_notation(self):
        assert format_decimal(CheckedDecimal(CheckedDecimal.MAX)) == "79228162514264337593543950335"


class TestWriteAccounts:
    def test_output_rows(self):
        out = io.StringIO()
        accounts = {
            1: ClientAccount(1, Balance(CheckedDecimal("1.5"), CheckedDecimal("0"))),
            2: ClientAccount(2, Balance(CheckedDecimal("2"), CheckedDecimal("3.25")), locked=True),
        }

        write_accounts(accounts, out)

        assert out.getvalue().splitlines() == [
            "client,available,held,total,locked",
            "1,1.5,0,1.5,false",
            "2,2,3.25,5.25,true",
        ]


class TestMain:
    def test_parse_args(self):
        args = parse_args(["input.csv", "--verbose"])
        assert args.path == "input.csv"
        assert args.verbose is True
        assert parse_args(["input.csv"]).verbose is False

    def test_missing_path_is_usage_error(self):
        with pytest.raises(SystemExit) as exc_info:
            parse_args([])
        assert exc_info.value.code == 2

    def test_example_file(self, tmp_path, capsys):
        csv_file = tmp_path / "transactions.csv"
        csv_file.write_text('\n'.join([
            "type, client, tx, amount",
            "deposit, 1, 1, 1.0",
            "deposit, 2, 2, 2.0",
            "deposit, 1, 3, 2.0",
            "withdrawal, 1, 4, 1.5",
            "withdrawal, 2, 5, 3.0",
        ]))

        exit_code = main([str(csv_file)])

        assert exit_code == 0
        assert capsys.readouterr().out.splitlines() == [
            "client,available,held,total,locked",
            "1,1.5,0,1.5,false",
            "2,2,0,2,false",
        ]

    def test_rejections_never_fatal(self, tmp_path, capsys):
        csv_file = tmp_path / "transactions.csv"
        csv_file.write_text('\n'.join([
            "type, client, tx, amount",
            "deposit, 1, 1, 10.0",
            "dispute, 1, 1,",
            "chargeback, 1, 1,",
            "deposit, 1, 2, 5.0",
            "nonsense, row",
            "withdrawal, 2, 3, 1.0",
        ]))

        exit_code = main([str(csv_file), "-v"])

        assert exit_code == 0
        assert capsys.readouterr().out.splitlines() == [
            "client,available,held,total,locked",
            "1,0,0,0,true",
            "2,0,0,0,false",
        ]

    def test_missing_file(self, tmp_path, capsys, caplog):
        with caplog.at_level(logging.ERROR):
            exit_code = main([str(tmp_path / "missing.csv")])

        assert exit_code == 1
        assert capsys.readouterr().out == ""
        assert any("Unable to read transactions" in record.getMessage() for record in caplog.records)

    def test_missing_header_columns(self, tmp_path, capsys):
        csv_file = tmp_path / "transactions.csv"
        csv_file.write_text("kind,who\ndeposit,1\n")

        assert main([str(csv_file)]) == 1
        assert capsys.readouterr().out == ""

import argparse
import csv
import logging
import sys
from typing import Dict, List, Optional, TextIO

from errors import InputFormatError
from models import ClientAccount
from payments_engine import PaymentsEngine

logger = logging.getLogger(__name__)

OUTPUT_HEADER = "client,available,held,total,locked"


def format_decimal(value) -> str:
    """Format decimal with up to 4 decimal places, removing trailing zeros."""
    text = f"{value:f}"
    if "." in text:
        text = text.rstrip("0").rstrip(".")
    return text


def write_accounts(accounts: Dict[int, ClientAccount], out: TextIO) -> None:
    print(OUTPUT_HEADER, file=out)
    for client_id, account in accounts.items():
        print(
            f"{client_id},"
            f"{format_decimal(account.available)},"
            f"{format_decimal(account.held)},"
            f"{format_decimal(account.total)},"
            f"{str(account.locked).lower()}",
            file=out,
        )


def parse_args(argv: Optional[List[str]] = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        prog="payments-engine",
        description="A toy transaction processing engine. Reads transactions from CSV, prints final accounts as CSV.",
    )
    parser.add_argument("path", help="Path to the CSV file to process")
    parser.add_argument(
        "-v", "--verbose",
        action="store_true",
        help="Report every rejected transaction on stderr",
    )
    return parser.parse_args(argv)


def main(argv: Optional[List[str]] = None) -> int:
    args = parse_args(argv)

    logging.basicConfig(
        level=logging.INFO if args.verbose else logging.WARNING,
        format="%(levelname)s: %(message)s",
        stream=sys.stderr,
    )

    engine = PaymentsEngine(verbose=args.verbose)
    try:
        accounts = engine.process_file(args.path)
    except (OSError, UnicodeDecodeError, csv.Error, InputFormatError) as e:
        logger.error(f"Unable to read transactions from {args.path}: {e}")
        return 1

    write_accounts(accounts, sys.stdout)
    return 0


if __name__ == "__main__":
    sys.exit(main())

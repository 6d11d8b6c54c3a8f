"""Normalize a CSV export of transactions.

Reads a CSV file, normalizes every row with TransactionProcessor and writes
the canonical records as JSON. Failed rows are reported individually and do
not stop the rest of the file.

Usage:
    centsible-normalize statement.csv --source chase
    centsible-normalize statement.csv --amount-column Amount --date-column "Posting Date" -o out.json
"""

import argparse
import csv
import json
import sys
from pathlib import Path
from typing import Optional, Sequence

import structlog

from .config import load_config, configure_logging
from .exceptions import ConfigurationError
from .transactions import BatchResult, TransactionProcessor

logger = structlog.get_logger()


def read_rows(
    path: Path,
    amount_column: str,
    date_column: str,
    description_column: str,
    source: Optional[str],
) -> list[dict]:
    """Read a CSV file into raw transaction mappings."""
    with path.open(newline="", encoding="utf-8-sig") as handle:
        reader = csv.DictReader(handle)
        return [
            {
                "raw_amount": row.get(amount_column),
                "raw_date": row.get(date_column),
                "raw_description": row.get(description_column),
                "source": source,
            }
            for row in reader
        ]


def render_report(result: BatchResult) -> str:
    lines = [result.summary]
    for error in result.errors:
        # +2: header line, 1-based numbering
        where = f" [{error.field}]" if error.field else ""
        lines.append(f"  row {error.index + 2}: {error.code.value}{where} {error.message}")
    return "\n".join(lines)


def main(argv: Optional[Sequence[str]] = None) -> int:
    """Entry point for ``centsible-normalize``."""
    parser = argparse.ArgumentParser(
        description="Normalize a CSV of transactions into canonical JSON records",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  centsible-normalize statement.csv --source chase
  centsible-normalize export.csv --amount-column Amount --date-column "Posting Date"
        """,
    )
    parser.add_argument("csv_file", type=str, help="Path to the CSV file")
    parser.add_argument(
        "--source", "-s",
        type=str,
        default="csv",
        help="Source tag recorded on every transaction (default: csv)",
    )
    parser.add_argument("--amount-column", default="amount", help="Amount column header")
    parser.add_argument("--date-column", default="date", help="Date column header")
    parser.add_argument(
        "--description-column", default="description", help="Description column header"
    )
    parser.add_argument(
        "--output", "-o",
        type=str,
        default=None,
        help="Write JSON here instead of stdout",
    )
    parser.add_argument(
        "--verbose", "-v",
        action="store_true",
        help="Log every processed row",
    )
    args = parser.parse_args(argv)

    try:
        config = load_config(log_level="DEBUG") if args.verbose else load_config()
    except ConfigurationError as e:
        print(f"Configuration error: {e}", file=sys.stderr)
        return 2
    configure_logging(config)

    path = Path(args.csv_file)
    if not path.is_file():
        print(f"File not found: {path}", file=sys.stderr)
        return 2

    rows = read_rows(
        path,
        amount_column=args.amount_column,
        date_column=args.date_column,
        description_column=args.description_column,
        source=args.source,
    )
    result = TransactionProcessor(config.ingestion).process_batch(rows)

    payload = json.dumps(
        [t.model_dump(mode="json", by_alias=True) for t in result.transactions],
        indent=2,
    )
    if args.output:
        Path(args.output).write_text(payload + "\n", encoding="utf-8")
        logger.info("normalized_output_written", path=args.output, count=result.succeeded)
    else:
        print(payload)

    print(render_report(result), file=sys.stderr)
    return 1 if result.failed else 0


if __name__ == "__main__":
    sys.exit(main())

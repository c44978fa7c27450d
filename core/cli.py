#!/usr/bin/env python3
"""
CLI for scoring county tax-delinquency CSV files.

Usage:
    python -m core.cli analyze <csv_file> [options]

Examples:
    # Score a county list and print a summary
    python -m core.cli analyze data/delinquent_2024.csv

    # Fix "today" and export the scored rows
    python -m core.cli analyze data/delinquent_2024.csv \\
        --reference-date 2024-06-01 --export scored.csv

    # Full result as JSON
    python -m core.cli analyze data/delinquent_2024.csv --json
"""

import argparse
import json
import logging
import sys
from datetime import date
from pathlib import Path

from core.export import export_csv
from core.ingestion import CSVStructureError, mapping_to_dict
from core.pipeline import UploadResult, meets_quality_threshold, process_upload
from utils.config import Config
from utils.formatting import format_currency, format_percent, format_ratio


logger = logging.getLogger(__name__)

EXIT_OK = 0
EXIT_UNREADABLE = 1
EXIT_LOW_QUALITY = 2


def _parse_date_arg(value: str) -> date:
    try:
        return date.fromisoformat(value)
    except ValueError:
        raise argparse.ArgumentTypeError(f"Invalid date (expected YYYY-MM-DD): {value}")


def print_summary(result: UploadResult, top: int) -> None:
    """Print a human-readable summary of a scored batch."""
    print(f"File: {result.filename}")
    print(f"Reference date: {result.reference_date.isoformat()}")
    print()

    print("Column mapping:")
    for header, semantic in mapping_to_dict(result.column_mapping).items():
        print(f"  {header!r:40} -> {semantic}")
    print()

    report = result.validation
    print("Validation:")
    print(f"  Rows:               {report.total_rows}")
    print(f"  Valid rows:         {report.valid_rows}")
    print(f"  Missing parcel ID:  {report.missing_parcel_id}")
    print(f"  Missing amount:     {report.missing_amounts}")
    print(f"  Invalid dates:      {report.invalid_dates}")
    print(f"  Quality score:      {format_percent(report.quality_score)}")
    for issue in report.issues[:10]:
        print(f"    - {issue}")
    if len(report.issues) > 10:
        print(f"    ... {len(report.issues) - 10} more")
    print()

    stats = result.portfolio
    print("Portfolio:")
    print(f"  Properties:         {stats.total_properties}")
    print(f"  Average score:      {stats.average_score:.1f}")
    print(
        f"  Score bands:        high {stats.score_distribution.high}, "
        f"medium {stats.score_distribution.medium}, "
        f"low {stats.score_distribution.low}"
    )
    print(f"  Total value:        {format_currency(stats.total_value)}")
    print(f"  Total delinquent:   {format_currency(stats.total_delinquent)}")
    print(f"  Avg equity ratio:   {format_ratio(stats.average_equity_ratio)}")
    for name, count in stats.property_types.items():
        print(f"  {name + ':':20}{count}")
    print()

    if top > 0 and stats.top_opportunities:
        print(f"Top {min(top, len(stats.top_opportunities))} opportunities:")
        for opp in stats.top_opportunities[:top]:
            print(
                f"  {opp.parcel_id or '(no parcel)':20} "
                f"score {opp.investment_score:3}  "
                f"equity {format_ratio(opp.equity_ratio):>9}  "
                f"owed {format_currency(opp.delinquent_amount)}"
            )


def cmd_analyze(args) -> int:
    """Score a CSV file and report on it."""
    input_path = Path(args.csv_file)

    if not input_path.exists():
        print(f"Error: File not found: {input_path}", file=sys.stderr)
        return EXIT_UNREADABLE

    try:
        content = input_path.read_text(encoding="utf-8")
    except (OSError, UnicodeDecodeError) as e:
        print(f"Error: Could not read {input_path}: {e}", file=sys.stderr)
        return EXIT_UNREADABLE

    try:
        result = process_upload(content, input_path.name, args.reference_date)
    except CSVStructureError as e:
        print(f"Error: Malformed CSV: {e}", file=sys.stderr)
        return EXIT_UNREADABLE

    if args.json:
        print(json.dumps(result.to_dict(include_properties=True), indent=2))
    else:
        print_summary(result, args.top)

    if args.export:
        export_path = Path(args.export)
        export_path.write_text(export_csv(result.properties), encoding="utf-8")
        print(f"Exported {result.total_properties} properties to: {export_path}", file=sys.stderr)

    if not meets_quality_threshold(result.validation, args.threshold):
        logger.warning(
            "Quality score %.1f%% below threshold %.1f%% for %s",
            result.validation.quality_score,
            args.threshold,
            input_path.name,
        )
        print(
            f"Error: Data quality too low ({format_percent(result.validation.quality_score)} "
            f"< {format_percent(args.threshold)})",
            file=sys.stderr,
        )
        return EXIT_LOW_QUALITY

    return EXIT_OK


def build_parser(config: Config) -> argparse.ArgumentParser:
    """Build the argument parser."""
    parser = argparse.ArgumentParser(
        description="Tax Lien Scout - delinquent property CSV scoring",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
    python -m core.cli analyze data/delinquent_2024.csv
    python -m core.cli analyze data/delinquent_2024.csv --json

Exit codes:
    0  success
    1  file missing, unreadable or malformed CSV
    2  data quality below threshold
        """,
    )

    subparsers = parser.add_subparsers(dest="command", required=True)

    analyze_parser = subparsers.add_parser(
        "analyze",
        help="Infer columns, validate and score a CSV file",
    )
    analyze_parser.add_argument(
        "csv_file",
        help="Path to the county CSV file",
    )
    analyze_parser.add_argument(
        "--reference-date",
        type=_parse_date_arg,
        default=None,
        help="Date used as today for delinquency ages (YYYY-MM-DD)",
    )
    analyze_parser.add_argument(
        "--threshold",
        type=float,
        default=config.quality_threshold,
        help=f"Minimum quality score in percent (default {config.quality_threshold})",
    )
    analyze_parser.add_argument(
        "--export",
        metavar="OUT_CSV",
        help="Write scored properties to this CSV file",
    )
    analyze_parser.add_argument(
        "--json",
        action="store_true",
        help="Print the full result as JSON",
    )
    analyze_parser.add_argument(
        "--top",
        type=int,
        default=10,
        help="Number of top opportunities to list (default 10)",
    )
    analyze_parser.set_defaults(func=cmd_analyze)

    return parser


def main(argv=None) -> int:
    """Main CLI entry point."""
    config = Config.load()
    logging.basicConfig(
        level=getattr(logging, config.log_level, logging.INFO),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
        stream=sys.stderr,
    )

    args = build_parser(config).parse_args(argv)
    return args.func(args)


if __name__ == "__main__":
    sys.exit(main())

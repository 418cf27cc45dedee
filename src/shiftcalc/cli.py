"""Command-line interface for the shiftcalc rotation analysis tool."""

import argparse
import dataclasses
import json
import logging
import sys
from datetime import date
from pathlib import Path
from typing import Optional

from shiftcalc.analysis.analyzer import RotationAnalyzer
from shiftcalc.domain.models import (
    CriteriaWeights,
    CycleConfiguration,
    FilterCriteria,
    ShiftCodeInfo,
)
from shiftcalc.output.pdf_generator import PDFGenerator
from shiftcalc.output.text_report import TextReportGenerator

logger = logging.getLogger(__name__)

_WEIGHT_KEYS = {
    "group": ("group", "groupWeight"),
    "days_off": ("days_off", "daysWeight", "daysOffWeight"),
    "shift": ("shift", "shiftWeight"),
    "blocks_5day": ("blocks_5day", "blocks5dayWeight"),
    "blocks_4day": ("blocks_4day", "blocks4dayWeight"),
    "weekend": ("weekend", "weekendWeight"),
    "saturday": ("saturday", "saturdayWeight"),
    "sunday": ("sunday", "sundayWeight"),
}


def _read_json(path: str):
    return json.loads(Path(path).read_text())


def _pick(data: dict, *keys, default=None):
    for key in keys:
        if data.get(key) is not None:
            return data[key]
    return default


def load_rotations(path: str) -> list[dict]:
    """Load rotation records from a JSON list (or {"lines": [...]})."""
    data = _read_json(path)
    if isinstance(data, dict):
        data = _pick(data, "lines", "schedules", default=[])
    if not isinstance(data, list):
        raise ValueError(f"{path}: expected a list of rotation records")
    return data


def load_shift_codes(path: Optional[str]) -> list[ShiftCodeInfo]:
    """Load the shift code catalog; no path gives an empty catalog."""
    if not path:
        return []
    data = _read_json(path)
    if isinstance(data, dict):
        data = _pick(data, "shift_codes", "shiftCodes", default=[])

    catalog = []
    for item in data:
        if not isinstance(item, dict) or not item.get("code"):
            logger.warning("Skipping shift code entry without a code: %r", item)
            continue
        catalog.append(ShiftCodeInfo(
            code=str(item["code"]).strip(),
            begin=_pick(item, "begin", "beginTime"),
            end=_pick(item, "end", "endTime"),
            category=item.get("category"),
            length=item.get("length"),
        ))
    return catalog


def load_holidays(path: Optional[str]) -> set[date]:
    """Load holiday dates from a JSON list of ISO dates or {"date": ...} objects."""
    if not path:
        return set()
    holidays = set()
    for item in _read_json(path):
        value = item.get("date") if isinstance(item, dict) else item
        holidays.add(date.fromisoformat(str(value)[:10]))
    return holidays


def load_criteria(path: str) -> FilterCriteria:
    """Load filter criteria from JSON (camelCase or snake_case keys)."""
    data = _read_json(path)
    if not isinstance(data, dict):
        raise ValueError(f"{path}: expected a criteria object")
    raw_weights = data.get("weights") or {}
    if not isinstance(raw_weights, dict):
        raise ValueError(f"{path}: weights must be an object")
    weights = CriteriaWeights(**{
        name: float(_pick(raw_weights, *keys, default=getattr(CriteriaWeights(), name)))
        for name, keys in _WEIGHT_KEYS.items()
    })

    return FilterCriteria(
        selected_groups=list(_pick(data, "selected_groups", "selectedGroups", default=[])),
        day_off_dates=[
            date.fromisoformat(str(d)[:10])
            for d in _pick(data, "day_off_dates", "dayOffDates", default=[])
        ],
        selected_codes=list(_pick(data, "selected_codes", "selectedShiftCodes", default=[])),
        selected_categories=list(
            _pick(data, "selected_categories", "selectedShiftCategories", default=[])
        ),
        selected_lengths=list(_pick(data, "selected_lengths", "selectedShiftLengths", default=[])),
        category_intent=_pick(data, "category_intent", "shiftCategoryIntent", default="any"),
        weights=weights,
    )


def build_config(args: argparse.Namespace) -> CycleConfiguration:
    """Cycle configuration from --settings, overridden by --cycles/--start-date."""
    settings = _read_json(args.settings) if args.settings else {}
    if args.cycles is not None:
        settings["numCycles"] = args.cycles
    if args.start_date:
        settings["startDate"] = args.start_date
    return CycleConfiguration.from_settings(settings)


def _emit(content: str, output_path: Optional[str]) -> None:
    if output_path:
        Path(output_path).write_text(content)
        print(f"Report written to {output_path}")
    else:
        print(content)


def _to_json(value) -> str:
    return json.dumps(dataclasses.asdict(value) if dataclasses.is_dataclass(value) else value,
                      indent=2, default=str)


def run_mirror(args: argparse.Namespace) -> int:
    """Find mirror lines for a reference line."""
    config = build_config(args)
    analyzer = RotationAnalyzer(config=config)
    lines = load_rotations(args.lines)
    result = analyzer.find_mirrored_lines(
        args.line_id,
        lines,
        shift_codes=load_shift_codes(args.shift_codes),
        target_groups=args.groups,
    )

    if args.json:
        _emit(_to_json(result), args.output)
    else:
        _emit(TextReportGenerator().mirror_report(result, limit=args.limit), args.output)
    return 0 if result.user_line is not None else 1


def run_metrics(args: argparse.Namespace) -> int:
    """Compute workload metrics for one or all lines."""
    config = build_config(args)
    analyzer = RotationAnalyzer(config=config)
    holidays = load_holidays(args.holidays)

    records = [analyzer.extractor.canonicalize(raw) for raw in load_rotations(args.lines)]
    if args.line_id is not None:
        records = [r for r in records if str(r.id) == str(args.line_id)]
        if not records:
            print(f"Line {args.line_id} not found", file=sys.stderr)
            return 1

    entries = [(record, analyzer.workload_metrics(record, holidays)) for record in records]

    if args.json:
        _emit(_to_json([
            {"line": record.label, "group": record.group, "metrics": dataclasses.asdict(metrics)}
            for record, metrics in entries
        ]), args.output)
    else:
        generator = TextReportGenerator()
        _emit("\n".join(generator.metrics_report(r, m) for r, m in entries), args.output)

    if args.pdf:
        PDFGenerator().generate(entries, config, args.pdf)
        print(f"PDF written to {args.pdf}")
    return 0


def run_score(args: argparse.Namespace) -> int:
    """Score lines against criteria and rank them."""
    config = build_config(args)
    analyzer = RotationAnalyzer(config=config)
    ranked, stats = analyzer.score_lines_with_stats(
        load_rotations(args.lines),
        load_criteria(args.criteria),
        shift_codes=load_shift_codes(args.shift_codes),
    )
    if args.limit:
        ranked = ranked[:args.limit]

    if args.json:
        _emit(_to_json({
            "stats": stats,
            "results": [
                {"line": record.label, "group": record.group, **dataclasses.asdict(result)}
                for record, result in ranked
            ],
        }), args.output)
    else:
        _emit(TextReportGenerator().scores_report(ranked), args.output)
    return 0


def _add_common_arguments(parser: argparse.ArgumentParser) -> None:
    parser.add_argument(
        "--lines", "-l",
        type=str,
        required=True,
        help="JSON file with rotation records",
    )
    parser.add_argument(
        "--shift-codes", "-s",
        type=str,
        help="JSON file with shift code definitions",
    )
    parser.add_argument(
        "--settings",
        type=str,
        help="JSON settings file (numCycles, startDate)",
    )
    parser.add_argument(
        "--cycles", "-n",
        type=int,
        help="Number of cycles (default: 1)",
    )
    parser.add_argument(
        "--start-date", "-d",
        type=str,
        help="Cycle start date, YYYY-MM-DD (default: today)",
    )
    parser.add_argument(
        "--output", "-o",
        type=str,
        help="Write the report to this file instead of stdout",
    )
    parser.add_argument(
        "--json",
        action="store_true",
        help="Output JSON instead of a text report",
    )


def main(argv: Optional[list[str]] = None) -> int:
    """Main entry point for CLI."""
    parser = argparse.ArgumentParser(
        description="shiftcalc - Rotation Analysis Tool",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  %(prog)s mirror -l lines.json -s codes.json --line-id 12 -n 3
  %(prog)s mirror -l lines.json --line-id 12 --groups OPS1 OPS2

  %(prog)s metrics -l lines.json -d 2025-10-09 -n 3
  %(prog)s metrics -l lines.json --holidays holidays.json --pdf metrics.pdf

  %(prog)s score -l lines.json -c criteria.json --limit 20
        """,
    )
    parser.add_argument(
        "--verbose", "-v",
        action="store_true",
        help="Enable debug logging",
    )

    subparsers = parser.add_subparsers(dest="command", help="Command to run")

    # Mirror command
    mirror_parser = subparsers.add_parser("mirror", help="Find trade partner lines")
    _add_common_arguments(mirror_parser)
    mirror_parser.add_argument(
        "--line-id", "-i",
        type=str,
        required=True,
        help="Id of the reference line",
    )
    mirror_parser.add_argument(
        "--groups", "-g",
        nargs="+",
        help="Only consider lines in these groups",
    )
    mirror_parser.add_argument(
        "--limit",
        type=int,
        default=10,
        help="Number of mirror lines to detail (default: 10)",
    )

    # Metrics command
    metrics_parser = subparsers.add_parser("metrics", help="Compute workload metrics")
    _add_common_arguments(metrics_parser)
    metrics_parser.add_argument(
        "--line-id", "-i",
        type=str,
        help="Only this line (default: all lines)",
    )
    metrics_parser.add_argument(
        "--holidays",
        type=str,
        help="JSON file with holiday dates",
    )
    metrics_parser.add_argument(
        "--pdf",
        type=str,
        help="Also write a PDF metrics report",
    )

    # Score command
    score_parser = subparsers.add_parser("score", help="Score lines against criteria")
    _add_common_arguments(score_parser)
    score_parser.add_argument(
        "--criteria", "-c",
        type=str,
        required=True,
        help="JSON file with filter criteria",
    )
    score_parser.add_argument(
        "--limit",
        type=int,
        default=0,
        help="Show only the top N lines (default: all)",
    )

    args = parser.parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    commands = {
        "mirror": run_mirror,
        "metrics": run_metrics,
        "score": run_score,
    }
    if args.command not in commands:
        parser.print_help()
        return 1

    try:
        return commands[args.command](args)
    except (OSError, ValueError) as exc:
        print(f"Error: {exc}", file=sys.stderr)
        return 2


if __name__ == "__main__":
    sys.exit(main())

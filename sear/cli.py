"""
SEAR Command Line Interface (CLI)
=================================

Runs the whole report once:

    python -m sear.cli --csv "path/to/StormData.csv.bz2"
    python -m sear.cli --url <dataset url> --cache-dir data --report storm_report.docx

Steps: (download) -> load -> normalize -> aggregate -> print rankings ->
write the requested exports/report. The input file is never modified.
"""

from __future__ import annotations
from typing import List, Optional, Sequence, Tuple
import argparse
import logging
import sys

from .config import DEFAULT_CUTOFF_YEAR, DEFAULT_DATE_FORMAT, DEFAULT_TOP_N, PARSE_ERROR_POLICIES, PipelineConfig
from .engine import StormAnalysis
from .errors import SearError
from .fetch import DEFAULT_CACHE_DIR, ensure_dataset

logger = logging.getLogger(__name__)

RANKED_METRICS = (
    ("fatalities", "Fatalities"),
    ("injuries", "Injuries"),
    ("economic_damage", "Economic damage (US$)"),
)


def build_parser() -> argparse.ArgumentParser:
    ap = argparse.ArgumentParser(prog="sear", description="Storm Events Analytical Report")
    src = ap.add_mutually_exclusive_group(required=True)
    src.add_argument("--csv", help="Path to the Storm Events CSV (may be .bz2/.gz)")
    src.add_argument("--url", help="Download the dataset from this URL (cached)")
    ap.add_argument("--cache-dir", default=DEFAULT_CACHE_DIR, help="Download cache directory")
    ap.add_argument("--cutoff-year", type=int, default=DEFAULT_CUTOFF_YEAR,
                    help="Drop events that began before this year")
    ap.add_argument("--top-n", type=int, default=DEFAULT_TOP_N, help="Size of ranking tables")
    ap.add_argument("--date-format", default=DEFAULT_DATE_FORMAT, help="strptime format of the begin date")
    ap.add_argument("--on-parse-error", choices=PARSE_ERROR_POLICIES, default="abort",
                    help="abort on the first bad row, or skip bad rows with a warning")
    ap.add_argument("--report", help="Write a DOCX report to this path")
    ap.add_argument("--export-csv", help="Write per-category summaries to CSV")
    ap.add_argument("--export-json", help="Write summaries + rankings to JSON")
    ap.add_argument("-v", "--verbose", action="store_true", help="Debug logging")
    return ap


def _print_ranking(title: str, rows: Sequence[Tuple[str, float]]) -> None:
    print(f"\n{title}")
    for i, (k, v) in enumerate(rows, 1):
        print(f"{i:>3}. {k:<28} {v:>20,.0f}")


def _print_report(analysis: StormAnalysis) -> None:
    c = analysis.stage_counts()
    print(f"Loaded {c['loaded']} records; {c['normalized']} with impact since {analysis.config.cutoff_year}; "
          f"{c['compliant']} compliant across {c['event_types']} event types.")
    if not analysis.summaries:
        print("No compliant event types to rank.")
        return
    for metric, label in RANKED_METRICS:
        rows = analysis.top(metric)
        _print_ranking(f"Top {len(rows)} by {label}:", rows)

    print("\nExcluded by non-compliant event types:")
    for imp in analysis.impact():
        print(f"  {imp.metric:<16} {imp.excluded_pct:6.2f}%")


def main(argv: Optional[List[str]] = None) -> int:
    """Entry point for the SEAR CLI. Returns the process exit code."""
    args = build_parser().parse_args(argv)
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    try:
        config = PipelineConfig(
            cutoff_year=args.cutoff_year,
            top_n=args.top_n,
            date_format=args.date_format or None,
            on_parse_error=args.on_parse_error,
        )
        path = args.csv or ensure_dataset(args.url, cache_dir=args.cache_dir)
        analysis = StormAnalysis.from_csv(path, config)
        _print_report(analysis)

        if args.export_csv:
            analysis.export_csv(args.export_csv)
            print(f"Exported CSV to {args.export_csv}")
        if args.export_json:
            analysis.export_json(args.export_json)
            print(f"Exported JSON to {args.export_json}")
        if args.report:
            from .report import generate_docx_report
            generate_docx_report(analysis, args.report)
            print(f"Report written to {args.report}")
    except (SearError, KeyError, ValueError, OSError) as e:
        logger.debug("Run failed", exc_info=True)
        print(f"Error: {e}", file=sys.stderr)
        return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())

#!/usr/bin/env python3
"""Surf conditions refresh runner.

Fetches conditions for every configured break, scores today and the
forecast days, and prints a ranked report.

Usage:
    # Print ranked report to console (default)
    python scripts/run_refresh.py

    # Only one break, with its forecast days
    python scripts/run_refresh.py --break trestles

    # Top 3 breaks as JSON
    python scripts/run_refresh.py --top 3 --format json

    # Save to file
    python scripts/run_refresh.py --output report.txt
"""

import argparse
import json
import logging
import sys
from dataclasses import asdict
from datetime import datetime
from pathlib import Path

# Add project root to path
sys.path.insert(0, str(Path(__file__).parent.parent))

from surfscore.core.breaks import BreakDatabase, get_break_database
from surfscore.core.geometry import direction_to_compass
from surfscore.core.refresher import BreakForecast, BreakRefresher, ConditionReport, rank_results
from surfscore.settings import FORECAST_DAYS


def setup_logging(verbose: bool = False):
    """Configure logging."""
    level = logging.DEBUG if verbose else logging.INFO
    logging.basicConfig(
        level=level,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    )
    # Quiet down noisy loggers
    logging.getLogger("urllib3").setLevel(logging.WARNING)


def parse_args(argv=None):
    """Parse command line arguments."""
    parser = argparse.ArgumentParser(
        description="Refresh and rank surf conditions",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog=__doc__,
    )

    parser.add_argument(
        "--format",
        choices=["text", "json"],
        default="text",
        help="Output format (default: text)",
    )

    parser.add_argument(
        "--output", "-o",
        type=str,
        help="Write output to file instead of stdout",
    )

    parser.add_argument(
        "--break",
        dest="break_id",
        type=str,
        help="Only refresh this break id",
    )

    parser.add_argument(
        "--breaks-file",
        type=str,
        help="Path to breaks.yaml (default: config/breaks.yaml)",
    )

    parser.add_argument(
        "--top",
        type=int,
        help="Only show the top N breaks",
    )

    parser.add_argument(
        "--days",
        type=int,
        default=FORECAST_DAYS,
        help=f"Forecast days to score, today included (default: {FORECAST_DAYS})",
    )

    parser.add_argument(
        "--verbose", "-v",
        action="store_true",
        help="Enable verbose logging",
    )

    return parser.parse_args(argv)


def format_report_line(report: ConditionReport) -> str:
    """One line per scored day."""
    tide = "n/a"
    if report.tide_height_ft is not None:
        tide = f"{report.tide_height_ft:.1f}ft {report.tide_state or ''}".strip()

    return (
        f"{report.forecast_date.isoformat()}  "
        f"{report.quality_score:3d} {report.quality_label:<9}  "
        f"{report.face_height_ft:4.1f}ft @ {report.swell_period_s:4.1f}s "
        f"{direction_to_compass(report.swell_direction_deg):<3}  "
        f"chop {report.wind_wave_height_ft:3.1f}ft  "
        f"wind {report.wind_speed_mph:4.1f}mph {direction_to_compass(report.wind_direction_deg):<3} "
        f"({report.wind_type})  tide {tide}"
    )


def format_text(results: list[BreakForecast], show_forecast: bool) -> str:
    """Format ranked results as a plain-text report."""
    lines = [
        f"Surf Conditions - {datetime.now().strftime('%Y-%m-%d %H:%M')}",
        "=" * 60,
    ]

    if not results:
        lines.append("No breaks could be scored.")

    for result in results:
        brk = result.surf_break
        lines.append("")
        lines.append(f"#{result.rank} {brk.name} ({brk.region}) - sources: {', '.join(result.today.sources)}")
        lines.append(f"  Today  {format_report_line(result.today)}")
        if show_forecast:
            for day in result.forecast:
                lines.append(f"         {format_report_line(day)}")
        for err in result.errors:
            lines.append(f"  ! {err}")

    return "\n".join(lines)


def format_json(results: list[BreakForecast]) -> str:
    """Format ranked results as JSON."""
    payload = []
    for result in results:
        payload.append({
            "rank": result.rank,
            "break_id": result.surf_break.id,
            "name": result.surf_break.name,
            "today": asdict(result.today),
            "forecast": [asdict(day) for day in result.forecast],
            "errors": result.errors,
        })
    return json.dumps(payload, indent=2, default=str)


def main(argv=None, refresher_factory=BreakRefresher):
    """Main entry point.

    Args:
        argv: Command line arguments. Defaults to sys.argv.
        refresher_factory: Called with break_db and forecast_days to build the refresher.
    """
    args = parse_args(argv)
    setup_logging(args.verbose)

    break_db = BreakDatabase(Path(args.breaks_file)) if args.breaks_file else get_break_database()

    breaks = break_db.get_all_breaks()
    if args.break_id:
        surf_break = break_db.get_break(args.break_id)
        if surf_break is None:
            print(f"Unknown break: {args.break_id}", file=sys.stderr)
            return 2
        breaks = [surf_break]

    refresher = refresher_factory(break_db=break_db, forecast_days=args.days)
    summary = refresher.refresh_all(breaks)
    ranked = rank_results(summary.results, top_n=args.top)

    if args.format == "json":
        output = format_json(ranked)
    else:
        output = format_text(ranked, show_forecast=bool(args.break_id) or len(ranked) == 1)

    if args.output:
        output_path = Path(args.output)
        output_path.write_text(output)
        print(f"Output written to: {output_path}", file=sys.stderr)
    else:
        print(output)

    # Summary (always to stderr so it doesn't pollute piped output)
    print(file=sys.stderr)
    print("=" * 50, file=sys.stderr)
    print("SUMMARY", file=sys.stderr)
    print("=" * 50, file=sys.stderr)
    print(f"  Processed: {summary.processed}", file=sys.stderr)
    print(f"  Errors: {summary.errors}", file=sys.stderr)
    if summary.failed_breaks:
        print(f"  Failed: {', '.join(summary.failed_breaks)}", file=sys.stderr)
    print(f"  Elapsed: {summary.elapsed_seconds}s", file=sys.stderr)
    print("=" * 50, file=sys.stderr)

    return 0 if summary.processed > 0 else 1


if __name__ == "__main__":
    sys.exit(main())

#!/usr/bin/env python3
"""Tests for the refresh command line runner.

Runs main() against a temporary breaks file with in-memory clients.

Run from project root:
    python scripts/test_run_refresh.py
"""

import json
import sys
import tempfile
from datetime import date
from pathlib import Path

# Add project root to path for imports
sys.path.insert(0, str(Path(__file__).parent.parent))
sys.path.insert(0, str(Path(__file__).parent))

from fakes import FakeBuoyClient, FakeMarineClient, FakeTidesClient, make_forecast_day
from run_refresh import main
from surfscore.core.refresher import BreakRefresher


BREAKS_YAML = """\
breaks:
  - id: west_beach
    name: West Beach
    region: Test Coast
    coordinates: {lat: 33.0, lon: -117.3}
    orientation_deg: 270
    break_type: beach
    optimal_swell_dir: {min: 260, max: 280}
    optimal_tide: {low: 1.0, high: 4.0}
  - id: east_reef
    name: East Reef
    region: Test Coast
    coordinates: {lat: 33.1, lon: -117.2}
    orientation_deg: 90
    break_type: reef
    optimal_swell_dir: {min: 260, max: 280}
    optimal_tide: {low: 1.0, high: 4.0}
"""


def write_breaks(tmp_path: Path) -> Path:
    path = tmp_path / "breaks.yaml"
    path.write_text(BREAKS_YAML)
    return path


def fake_refresher_factory(marine):
    def factory(break_db, forecast_days):
        return BreakRefresher(
            break_db=break_db,
            marine_client=marine,
            buoy_client=FakeBuoyClient(),
            tides_client=FakeTidesClient(),
            forecast_days=forecast_days,
        )
    return factory


def working_marine():
    return FakeMarineClient([
        make_forecast_day(date(2024, 6, 1)),
        make_forecast_day(date(2024, 6, 2), swell_period_s=9.0),
    ])


def test_json_output_ranks_breaks(tmp_path):
    breaks_file = write_breaks(tmp_path)
    output = tmp_path / "report.json"

    code = main(
        ["--breaks-file", str(breaks_file), "--format", "json", "--output", str(output)],
        refresher_factory=fake_refresher_factory(working_marine()),
    )

    assert code == 0
    payload = json.loads(output.read_text())
    assert [entry["break_id"] for entry in payload] == ["west_beach", "east_reef"]
    assert [entry["rank"] for entry in payload] == [1, 2]

    top = payload[0]
    assert set(top) == {"rank", "break_id", "name", "today", "forecast", "errors"}
    assert top["name"] == "West Beach"
    assert top["today"]["forecast_date"] == "2024-06-01"
    assert top["today"]["quality_score"] == 90  # no tide data
    assert top["today"]["sources"] == ["forecast"]
    assert [day["forecast_date"] for day in top["forecast"]] == ["2024-06-02"]
    assert top["errors"] == []
    assert payload[1]["today"]["wind_type"] == "onshore"


def test_top_limits_breaks(tmp_path):
    breaks_file = write_breaks(tmp_path)
    output = tmp_path / "report.json"

    code = main(
        ["--breaks-file", str(breaks_file), "--format", "json", "--top", "1", "--output", str(output)],
        refresher_factory=fake_refresher_factory(working_marine()),
    )

    assert code == 0
    payload = json.loads(output.read_text())
    assert [entry["break_id"] for entry in payload] == ["west_beach"]


def test_single_break_text_report(tmp_path):
    breaks_file = write_breaks(tmp_path)
    output = tmp_path / "report.txt"

    code = main(
        ["--breaks-file", str(breaks_file), "--break", "east_reef", "--output", str(output)],
        refresher_factory=fake_refresher_factory(working_marine()),
    )

    assert code == 0
    text = output.read_text()
    assert "#1 East Reef (Test Coast)" in text
    assert "West Beach" not in text
    assert "2024-06-01" in text
    assert "2024-06-02" in text  # forecast days are shown for a single break
    assert "(onshore)" in text
    assert "tide n/a" in text


def test_unknown_break_exits_2(tmp_path):
    breaks_file = write_breaks(tmp_path)

    code = main(
        ["--breaks-file", str(breaks_file), "--break", "nowhere"],
        refresher_factory=fake_refresher_factory(working_marine()),
    )

    assert code == 2


def test_no_scored_breaks_exits_1(tmp_path):
    breaks_file = write_breaks(tmp_path)
    output = tmp_path / "report.json"

    code = main(
        ["--breaks-file", str(breaks_file), "--format", "json", "--output", str(output)],
        refresher_factory=fake_refresher_factory(FakeMarineClient([], error=True)),
    )

    assert code == 1
    assert json.loads(output.read_text()) == []


def test_days_option_reaches_refresher(tmp_path):
    breaks_file = write_breaks(tmp_path)
    seen = []

    def factory(break_db, forecast_days):
        seen.append(forecast_days)
        return fake_refresher_factory(working_marine())(break_db, forecast_days)

    code = main(
        ["--breaks-file", str(breaks_file), "--days", "3", "--output", str(tmp_path / "out.txt")],
        refresher_factory=factory,
    )

    assert code == 0
    assert seen == [3]


def run_all_tests():
    """Run all tests and report results."""
    tests = [
        test_json_output_ranks_breaks,
        test_top_limits_breaks,
        test_single_break_text_report,
        test_unknown_break_exits_2,
        test_no_scored_breaks_exits_1,
        test_days_option_reaches_refresher,
    ]

    failed = 0
    for test_func in tests:
        with tempfile.TemporaryDirectory() as tmp_dir:
            try:
                test_func(Path(tmp_dir))
                print(f"  ✓ {test_func.__name__}")
            except AssertionError as e:
                failed += 1
                print(f"  ✗ FAILED: {test_func.__name__} {e}")

    print(f"\n  Passed: {len(tests) - failed}  Failed: {failed}  Total: {len(tests)}")
    return failed == 0


if __name__ == "__main__":
    success = run_all_tests()
    sys.exit(0 if success else 1)

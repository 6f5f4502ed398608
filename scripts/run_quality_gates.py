#!/usr/bin/env python3
"""
Run lint, type and test gates for vendor_insights and write a JSON report.

Usage:
    python scripts/run_quality_gates.py            # all gates
    python scripts/run_quality_gates.py --only tests --only lint

Gate settings (line length, strictness, test paths) come from pyproject.toml;
this script only decides which tools run and collects their results. The
pytest gate also records per-suite counts from the pytest-json-report output.
"""

from __future__ import annotations

import argparse
import datetime
import importlib.util
import json
import subprocess
import sys
from collections import Counter
from dataclasses import asdict, dataclass, field
from pathlib import Path
from typing import Any

ROOT = Path(__file__).resolve().parent.parent
ARTIFACTS_DIR = ROOT / "artifacts"
PYTEST_REPORT = ARTIFACTS_DIR / "pytest-report.json"
SUITES = ("unit", "integration", "api", "regression")


@dataclass(frozen=True)
class Gate:
    name: str
    module: str
    args: tuple[str, ...]

    def command(self) -> list[str]:
        return [sys.executable, "-m", self.module, *self.args]


@dataclass
class GateOutcome:
    name: str
    status: str  # "pass" | "fail" | "skipped"
    exit_code: int | None = None
    output: str = ""
    details: dict[str, Any] = field(default_factory=dict)


GATES: tuple[Gate, ...] = (
    Gate("lint", "ruff", ("check", "vendor_insights", "tests", "scripts")),
    Gate("types", "mypy", ("vendor_insights",)),
    Gate(
        "tests",
        "pytest",
        ("-q", "--json-report", f"--json-report-file={PYTEST_REPORT}"),
    ),
)


def suite_counts(report_path: Path) -> dict[str, dict[str, int]]:
    """Outcome counts per test suite directory from a pytest-json-report file."""
    if not report_path.exists():
        return {}

    report = json.loads(report_path.read_text())
    counts: dict[str, Counter[str]] = {suite: Counter() for suite in SUITES}
    for test in report.get("tests", []):
        parts = Path(test["nodeid"].split("::", 1)[0]).parts
        suite = parts[1] if len(parts) > 2 and parts[1] in counts else "other"
        counts.setdefault(suite, Counter())[test["outcome"]] += 1

    return {suite: dict(c) for suite, c in counts.items() if c}


def run_gate(gate: Gate) -> GateOutcome:
    if importlib.util.find_spec(gate.module) is None:
        print(f"[{gate.name}] skipped: {gate.module} is not installed")
        return GateOutcome(gate.name, "skipped", output=f"{gate.module} not installed")

    print(f"[{gate.name}] {' '.join(gate.command()[1:])}", flush=True)
    result = subprocess.run(gate.command(), cwd=ROOT, capture_output=True, text=True, check=False)
    outcome = GateOutcome(
        gate.name,
        "pass" if result.returncode == 0 else "fail",
        exit_code=result.returncode,
        output=(result.stdout + result.stderr).strip(),
    )
    if gate.name == "tests":
        outcome.details["suites"] = suite_counts(PYTEST_REPORT)
    print(f"[{gate.name}] {outcome.status}")
    return outcome


def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description=__doc__, formatter_class=argparse.RawDescriptionHelpFormatter)
    parser.add_argument(
        "--only",
        action="append",
        choices=[g.name for g in GATES],
        help="Run only the named gate (repeatable)",
    )
    return parser.parse_args(argv)


def main(argv: list[str] | None = None) -> int:
    args = parse_args(argv)
    selected = [g for g in GATES if not args.only or g.name in args.only]

    ARTIFACTS_DIR.mkdir(exist_ok=True)
    outcomes = [run_gate(gate) for gate in selected]
    failed = [o for o in outcomes if o.status == "fail"]

    report = {
        "project": "vendor-insights",
        "timestamp_utc": datetime.datetime.now(datetime.UTC).isoformat(),
        "overall_status": "fail" if failed else "pass",
        "gates": [asdict(o) for o in outcomes],
    }
    report_path = ARTIFACTS_DIR / "quality_gates_run.json"
    report_path.write_text(json.dumps(report, indent=2))
    print(f"Report: {report_path.relative_to(ROOT)}")

    for outcome in failed:
        print(f"\n--- {outcome.name} failed (exit {outcome.exit_code}) ---\n{outcome.output}")

    return 1 if failed else 0


if __name__ == "__main__":
    sys.exit(main())

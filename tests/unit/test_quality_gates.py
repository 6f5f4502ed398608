"""
Tests for the quality gate runner script.
"""

from __future__ import annotations

import importlib.util
import json
import sys
from pathlib import Path
from types import ModuleType

import pytest

from tests.conftest import ROOT


@pytest.fixture(scope="module")
def gates() -> ModuleType:
    """The runner loaded from scripts/."""
    spec = importlib.util.spec_from_file_location("run_quality_gates", ROOT / "scripts" / "run_quality_gates.py")
    assert spec is not None and spec.loader is not None
    module = importlib.util.module_from_spec(spec)
    sys.modules[spec.name] = module
    spec.loader.exec_module(module)
    return module


class TestGateSelection:
    """Gate definitions and --only."""

    def test_gates_target_package(self, gates: ModuleType) -> None:
        """Lint and type gates run against vendor_insights."""
        by_name = {g.name: g for g in gates.GATES}
        assert set(by_name) == {"lint", "types", "tests"}
        assert "vendor_insights" in by_name["types"].args
        assert "vendor_insights" in by_name["lint"].args

    def test_only_flag(self, gates: ModuleType) -> None:
        """--only is repeatable."""
        args = gates.parse_args(["--only", "tests", "--only", "lint"])
        assert args.only == ["tests", "lint"]

    def test_unknown_gate(self, gates: ModuleType) -> None:
        """Unknown gate names are an argparse error."""
        with pytest.raises(SystemExit):
            gates.parse_args(["--only", "coverage"])


class TestSuiteCounts:
    """Per-suite outcome counts from the pytest JSON report."""

    def test_counts_by_directory(self, gates: ModuleType, tmp_path: Path) -> None:
        """Tests are grouped by their tests/<suite> directory."""
        report = tmp_path / "report.json"
        report.write_text(
            json.dumps(
                {
                    "tests": [
                        {"nodeid": "tests/unit/test_hours.py::TestX::test_a", "outcome": "passed"},
                        {"nodeid": "tests/unit/test_hours.py::TestX::test_b", "outcome": "failed"},
                        {"nodeid": "tests/api/test_events_api.py::test_c", "outcome": "passed"},
                        {"nodeid": "tests/test_structure.py::test_d", "outcome": "passed"},
                    ]
                }
            )
        )

        assert gates.suite_counts(report) == {
            "unit": {"passed": 1, "failed": 1},
            "api": {"passed": 1},
            "other": {"passed": 1},
        }

    def test_missing_report(self, gates: ModuleType, tmp_path: Path) -> None:
        """No report file means no counts."""
        assert gates.suite_counts(tmp_path / "absent.json") == {}

import os
import sys
import json
from datetime import datetime, timedelta

REPO_ROOT = os.path.abspath(os.path.join(os.path.dirname(__file__), '..'))
if REPO_ROOT not in sys.path:
	sys.path.insert(0, REPO_ROOT)

from evaluation import evaluation as ev


PYTEST_OUTPUT = """
============================= test session starts ==============================
tests/test_huffman_core.py::test_aaabbc_scenario PASSED                  [ 25%]
tests/test_huffman_core.py::test_prefix_free_codes FAILED                [ 50%]
tests/test_huffman_service.py::test_empty_input SKIPPED (no data)        [ 75%]
tests/test_huffman_service.py::test_small_inputs ERROR                   [100%]
=========================== short test summary info ============================
"""


def test_parse_pytest_verbose_output():
	tests = ev.parse_pytest_verbose_output(PYTEST_OUTPUT)
	assert [t["outcome"] for t in tests] == ["passed", "failed", "skipped", "error"]
	assert tests[0]["nodeid"] == "tests/test_huffman_core.py::test_aaabbc_scenario"
	assert tests[0]["name"] == "test_aaabbc_scenario"


def test_summarize_counts_outcomes():
	summary = ev.summarize(ev.parse_pytest_verbose_output(PYTEST_OUTPUT))
	assert summary == {"total": 4, "passed": 1, "failed": 1, "errors": 1, "skipped": 1}


def test_evaluate_samples_are_lossless():
	results = ev.evaluate_samples(ev.SAMPLE_TEXTS)
	assert set(results) == set(ev.SAMPLE_TEXTS)
	assert all(r["lossless"] for r in results.values())
	assert results["skewed"]["compressed_bits"] == 9
	assert results["single_symbol"]["compressed_bits"] == 64
	assert results["lorem"]["ratio"] < 1.0


def test_build_report_success_and_failure():
	started = datetime(2024, 1, 1, 12, 0, 0)
	finished = started + timedelta(seconds=2)
	samples = {"ok": {"lossless": True}}

	report = ev.build_report("abcd1234", started, finished, samples, None)
	assert report["success"] is True
	assert report["error"] is None
	assert report["duration_seconds"] == 2.0
	assert "python_version" in report["environment"]
	assert report["environment"]["samples"] == ["ok"]
	assert "git_commit" in report["environment"]

	failed_tests = {"success": False}
	report = ev.build_report("abcd1234", started, finished, samples, failed_tests)
	assert report["success"] is False
	assert report["error"] == "Test suite failed"

	report = ev.build_report("abcd1234", started, finished, {"bad": {"lossless": False}}, None)
	assert report["error"] == "Round trip failed for at least one sample"


def test_generate_output_path_layout():
	path = ev.generate_output_path(datetime(2024, 3, 5, 7, 8, 9))
	assert path.name == "report.json"
	assert path.parent.name == "07-08-09"
	assert path.parent.parent.name == "2024-03-05"


def test_main_writes_report_without_tests(tmp_path):
	output = tmp_path / "report.json"
	assert ev.main(["--skip-tests", "--output", str(output)]) == 0
	report = json.loads(output.read_text())
	assert report["success"] is True
	assert report["results"]["tests"] is None
	assert set(report["results"]["samples"]) == set(ev.SAMPLE_TEXTS)


def test_generate_run_id_is_prefixed_and_unique():
	first = ev.generate_run_id()
	assert first.startswith("huff-")
	assert len(first) == len("huff-") + 8
	assert ev.generate_run_id() != first
	assert ev.generate_run_id("bench").startswith("bench-")

#!/usr/bin/env python3
"""
Evaluation runner for the Huffman codec.

This evaluation script:
- Round-trips a set of sample texts through HuffmanService and prints compression statistics
- Runs pytest on the tests/ folder and collects individual test results
- Generates a structured JSON report with environment metadata

Run with:
    python evaluation/evaluation.py [--output report.json] [--skip-tests]
"""
import json
import platform
import subprocess
import sys
import uuid
from datetime import datetime
from pathlib import Path

from loguru import logger

PROJECT_ROOT = Path(__file__).resolve().parent.parent
if str(PROJECT_ROOT) not in sys.path:
    sys.path.insert(0, str(PROJECT_ROOT))

from huffman_config import HuffmanConfig, configure_logging  # noqa: E402
from huffman_service import HuffmanService  # noqa: E402

SAMPLE_TEXTS = {
    "lorem": (
        "Lorem ipsum dolor sit amet consectetur adipisicing elit. Quibusdam mollitia "
        "ducimus sunt veniam, quaerat voluptate excepturi odit similique, quas error "
        "libero sapiente illo possimus magnam eligendi. Quod, incidunt. Quas, officiis."
    ),
    "skewed": "aaabbc",
    "single_symbol": "z" * 64,
    "log_lines": "\n".join(
        f"2024-01-01T00:00:{i:02d} INFO request served path=/api/items status=200"
        for i in range(20)
    ),
}


def generate_run_id(prefix="huff"):
    """Short run ID used to name the report, e.g. ``huff-1a2b3c4d``."""
    return f"{prefix}-{uuid.uuid4().hex[:8]}"


def _git(*args):
    try:
        result = subprocess.run(
            ["git", *args],
            capture_output=True,
            text=True,
            cwd=str(PROJECT_ROOT),
            timeout=5,
        )
    except (OSError, subprocess.SubprocessError) as e:
        logger.debug("git {} unavailable: {}", " ".join(args), e)
        return None
    if result.returncode != 0:
        return None
    return result.stdout.strip()


def get_git_info():
    """Get git commit and branch information."""
    commit = _git("rev-parse", "HEAD")
    branch = _git("rev-parse", "--abbrev-ref", "HEAD")
    return {
        "git_commit": commit[:8] if commit else "unknown",
        "git_branch": branch or "unknown",
    }


def get_environment_info(sample_names=()):
    """Interpreter, host and checkout details, plus which samples were compressed."""
    return {
        "python_version": platform.python_version(),
        "implementation": platform.python_implementation(),
        "platform": platform.platform(),
        "hostname": platform.node(),
        "samples": sorted(sample_names),
        **get_git_info(),
    }


def evaluate_samples(samples, config=None):
    """Compute compression statistics for every named sample."""
    service = HuffmanService(config)
    results = {}
    for name, text in samples.items():
        stats = service.stats(text)
        results[name] = stats.as_dict()
        print(
            f"  {'✅' if stats.lossless else '❌'} {name}: {stats.original_bits} -> "
            f"{stats.compressed_bits} bits ({stats.ratio * 100:.2f}%)"
        )
    return results


def run_pytest(tests_dir, timeout=300):
    """
    Run pytest on the tests/ folder.

    Returns:
        dict with test results
    """
    print(f"\n{'=' * 60}")
    print("RUNNING TESTS")
    print(f"{'=' * 60}")
    print(f"Tests directory: {tests_dir}")

    cmd = [
        sys.executable, "-m", "pytest",
        str(tests_dir),
        "-v",
        "--tb=short",
    ]

    try:
        result = subprocess.run(
            cmd,
            capture_output=True,
            text=True,
            cwd=str(PROJECT_ROOT),
            timeout=timeout,
        )
    except subprocess.TimeoutExpired:
        print("❌ Test execution timed out")
        return {
            "success": False,
            "exit_code": -1,
            "tests": [],
            "summary": {"error": "Test execution timed out"},
            "stdout": "",
            "stderr": "",
        }

    stdout = result.stdout
    stderr = result.stderr
    tests = parse_pytest_verbose_output(stdout)
    summary = summarize(tests)

    print(
        f"\nResults: {summary['passed']} passed, {summary['failed']} failed, "
        f"{summary['errors']} errors, {summary['skipped']} skipped (total: {summary['total']})"
    )

    return {
        "success": result.returncode == 0,
        "exit_code": result.returncode,
        "tests": tests,
        "summary": summary,
        "stdout": stdout[-3000:],
        "stderr": stderr[-1000:],
    }


def summarize(tests):
    outcomes = [t.get("outcome") for t in tests]
    return {
        "total": len(tests),
        "passed": outcomes.count("passed"),
        "failed": outcomes.count("failed"),
        "errors": outcomes.count("error"),
        "skipped": outcomes.count("skipped"),
    }


def parse_pytest_verbose_output(output):
    """Parse pytest verbose output to extract test results."""
    statuses = {
        " PASSED": "passed",
        " FAILED": "failed",
        " ERROR": "error",
        " SKIPPED": "skipped",
    }
    tests = []

    for line in output.split('\n'):
        line_stripped = line.strip()

        # Match lines like: tests/test_huffman_core.py::test_round_trip PASSED [ 10%]
        if '::' not in line_stripped:
            continue
        for status_word, outcome in statuses.items():
            if status_word in line_stripped:
                nodeid = line_stripped.split(status_word)[0].strip()
                tests.append({
                    "nodeid": nodeid,
                    "name": nodeid.split("::")[-1],
                    "outcome": outcome,
                })
                break

    return tests


def generate_output_path(now=None):
    """Generate output path in format: evaluation/YYYY-MM-DD/HH-MM-SS/report.json"""
    now = now or datetime.now()
    output_dir = PROJECT_ROOT / "evaluation" / now.strftime("%Y-%m-%d") / now.strftime("%H-%M-%S")
    return output_dir / "report.json"


def build_report(run_id, started_at, finished_at, samples, tests):
    lossless = all(s["lossless"] for s in samples.values())
    tests_ok = tests is None or tests.get("success", False)
    success = lossless and tests_ok
    if success:
        error = None
    elif not lossless:
        error = "Round trip failed for at least one sample"
    else:
        error = "Test suite failed"

    return {
        "run_id": run_id,
        "started_at": started_at.isoformat(),
        "finished_at": finished_at.isoformat(),
        "duration_seconds": round((finished_at - started_at).total_seconds(), 6),
        "success": success,
        "error": error,
        "environment": get_environment_info(samples),
        "results": {"samples": samples, "tests": tests},
    }


def main(argv=None):
    """Main entry point for evaluation."""
    import argparse

    parser = argparse.ArgumentParser(description="Run Huffman codec evaluation")
    parser.add_argument(
        "--output",
        type=str,
        default=None,
        help="Output JSON file path (default: evaluation/YYYY-MM-DD/HH-MM-SS/report.json)"
    )
    parser.add_argument(
        "--skip-tests",
        action="store_true",
        help="Only evaluate the sample texts, do not run pytest"
    )
    args = parser.parse_args(argv)

    config = HuffmanConfig.from_env()
    configure_logging(config)

    run_id = generate_run_id()
    started_at = datetime.now()

    print(f"Run ID: {run_id}")
    print(f"Started at: {started_at.isoformat()}")
    print(f"\n{'=' * 60}")
    print("COMPRESSION SAMPLES")
    print(f"{'=' * 60}")

    samples = evaluate_samples(SAMPLE_TEXTS, config)
    tests = None if args.skip_tests else run_pytest(PROJECT_ROOT / "tests")

    report = build_report(run_id, started_at, datetime.now(), samples, tests)

    output_path = Path(args.output) if args.output else generate_output_path(started_at)
    output_path.parent.mkdir(parents=True, exist_ok=True)
    with open(output_path, "w") as f:
        json.dump(report, f, indent=2)
    print(f"\n✅ Report saved to: {output_path}")

    print(f"\n{'=' * 60}")
    print("EVALUATION COMPLETE")
    print(f"{'=' * 60}")
    print(f"Run ID: {run_id}")
    print(f"Duration: {report['duration_seconds']:.2f}s")
    print(f"Success: {'✅ YES' if report['success'] else '❌ NO'}")

    return 0 if report["success"] else 1


if __name__ == "__main__":
    sys.exit(main())

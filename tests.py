"""
Convenience script to run the Batak test suite.

Usage (from project root):

    python tests.py            # whole suite
    python tests.py -k bidding # extra arguments go to pytest

Behaviour:
- Ensures `pytest` is available by installing `.[dev]` if needed.
- Runs `python -m pytest` in the project root.
"""
from __future__ import annotations

import subprocess
import sys
from pathlib import Path


ROOT = Path(__file__).resolve().parent


def ensure_test_dependencies() -> None:
    """
    Ensure pytest is available, installing the dev extra otherwise.
    """
    try:
        import pytest  # noqa: F401
        return
    except ImportError:
        pass

    print("Installing test dependencies (.[dev]) ...")
    subprocess.check_call(
        [sys.executable, "-m", "pip", "install", "-e", ".[dev]"],
        cwd=str(ROOT),
    )


def main() -> None:
    ensure_test_dependencies()
    print("Running Batak test suite with pytest ...")
    subprocess.check_call(
        [sys.executable, "-m", "pytest", *sys.argv[1:]],
        cwd=str(ROOT),
    )


if __name__ == "__main__":
    main()

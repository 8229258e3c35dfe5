"""
Convenience launcher for a Batak simulation (heuristic players at every seat).

Behaviour:
- If not already running inside a virtual environment, create ``.venv`` in the
  project root (if it does not exist), then re-run this script inside it.
- Inside the venv:
  - If batak is importable: run the simulation directly (no pip install).
  - Otherwise: install the package with pip install -e .[dev], then run it.

Extra arguments are passed to ``batak.cli simulate``, e.g.
``python run.py --rounds 10 --seed 3``.
"""
from __future__ import annotations

import os
import subprocess
import sys
from pathlib import Path


ROOT = Path(__file__).resolve().parent
VENV_DIR = ROOT / ".venv"


def in_virtualenv() -> bool:
    """Return True if we're currently running inside any virtualenv."""
    return sys.prefix != getattr(sys, "base_prefix", sys.prefix) or bool(
        os.environ.get("VIRTUAL_ENV")
    )


def venv_python_path() -> Path:
    """Return the path to the python executable inside .venv."""
    if os.name == "nt":
        return VENV_DIR / "Scripts" / "python.exe"
    return VENV_DIR / "bin" / "python"


def package_installed() -> bool:
    """Return True if the batak package is importable."""
    try:
        import batak  # noqa: F401
        return True
    except ImportError:
        return False


def simulate_args() -> list[str]:
    return [a for a in sys.argv[1:] if a != "--inside-venv"]


def ensure_venv_and_rerun() -> None:
    """Create .venv if needed and re-run this script inside it."""
    if not VENV_DIR.exists():
        print(f"Creating virtual environment at {VENV_DIR} ...")
        subprocess.check_call(
            [sys.executable, "-m", "venv", str(VENV_DIR)],
            cwd=str(ROOT),
        )

    py = venv_python_path()
    print(f"Re-running inside virtualenv using {py} ...")
    cmd = [str(py), str(ROOT / "run.py"), "--inside-venv", *simulate_args()]
    subprocess.check_call(cmd, cwd=str(ROOT))


def inside_venv_main() -> None:
    """Install the package if needed, then run a simulated match."""
    if not package_installed():
        print("Installing batak-engine with dev extras into virtualenv ...")
        subprocess.check_call(
            [sys.executable, "-m", "pip", "install", "-e", ".[dev]"],
            cwd=str(ROOT),
        )

    subprocess.check_call(
        [sys.executable, "-m", "batak.cli", "simulate", *simulate_args()],
        cwd=str(ROOT),
    )


def main() -> None:
    if "--inside-venv" in sys.argv:
        inside_venv_main()
        return

    if in_virtualenv():
        inside_venv_main()
    else:
        ensure_venv_and_rerun()


if __name__ == "__main__":
    main()

"""Run the fintrack CLI from a source checkout.

Usage:
  python scripts/run_cli.py login --email alice@example.com --password '...'
"""

import sys
from pathlib import Path

ROOT = Path(__file__).resolve().parents[1]
sys.path.insert(0, str(ROOT))

from fintrack.cli import main


if __name__ == "__main__":
    main()

"""
Run the compliance document status refresh from CLI.
"""

from __future__ import annotations

import argparse
import json
import logging
from datetime import date

from app.scheduler.jobs import run_document_status_refresh


def main() -> int:
    parser = argparse.ArgumentParser(description="Recompute stored compliance document statuses.")
    parser.add_argument(
        "--date",
        dest="today",
        type=date.fromisoformat,
        default=None,
        help="Optional reference date (YYYY-MM-DD); defaults to today in UTC.",
    )
    args = parser.parse_args()

    logging.basicConfig(
        level=logging.INFO,
        format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
    )
    changed = run_document_status_refresh(today=args.today)
    print(json.dumps({"changed": changed}, indent=2))
    return 0


if __name__ == "__main__":
    raise SystemExit(main())

"""
Process the template sync queue once.

Materializes slot instances for queued venues and prints per-venue
refreshed-row counts. Exits with status 1 when any venue failed.

Usage:
    python scripts/process_template_sync_queue.py --limit 25 --horizon-days 180
"""

import argparse
import logging
from pathlib import Path
import sys
from typing import List, Optional

# Add backend to path
sys.path.insert(0, str(Path(__file__).parent.parent))

from venuebook.core.config import settings  # noqa: E402
from venuebook.database import SessionLocal  # noqa: E402
from venuebook.services.template_materializer import TemplateMaterializerService  # noqa: E402

logger = logging.getLogger("process_template_sync_queue")


def _positive_int(value: str) -> int:
    number = int(value)
    if number < 1:
        raise argparse.ArgumentTypeError(f"expected a positive integer, got {value}")
    return number


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Process the template sync queue")
    parser.add_argument(
        "--limit",
        type=_positive_int,
        default=settings.sync_queue_limit,
        help="Maximum venues to process (default: %(default)s)",
    )
    parser.add_argument(
        "--horizon-days",
        type=_positive_int,
        default=settings.sync_horizon_days,
        help="Days ahead to materialize (default: %(default)s)",
    )
    return parser


def main(argv: Optional[List[str]] = None) -> int:
    logging.basicConfig(
        level=settings.log_level, format="%(asctime)s - %(name)s - %(levelname)s - %(message)s"
    )
    args = build_parser().parse_args(argv)

    db = SessionLocal()
    try:
        results = TemplateMaterializerService(db).process_sync_queue(
            limit=args.limit, horizon_days=args.horizon_days
        )
    except Exception:
        logger.exception("Template sync queue processing failed")
        return 1
    finally:
        db.close()

    if not results:
        print("No queued venues")
        return 0

    failed = 0
    for result in results:
        if result.status == "failed":
            failed += 1
            print(f"{result.venue_id}: FAILED ({result.error})")
        else:
            print(f"{result.venue_id}: refreshed_rows={result.refreshed_rows}")

    print(f"\nProcessed {len(results)} venues ({failed} failed)")
    return 1 if failed else 0


if __name__ == "__main__":
    sys.exit(main())

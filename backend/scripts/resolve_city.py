"""Resolve a city into destinations and print one page as JSON.

Usage:
    python -m scripts.resolve_city "Paris" [--category museum] [--page 1] [--page-size 21]

Reads the same environment (and optional backend/.env) as the API.
Exit code is 1 when the resolution failed (blank city, geocoding or Overpass failure).
"""

from __future__ import annotations

import argparse
import json
import logging
import sys
from pathlib import Path
from typing import List, Optional

from dotenv import load_dotenv

load_dotenv(Path(__file__).resolve().parents[1] / ".env")

from services.destination_pages import paginate_destinations  # noqa: E402
from services.destination_resolver import DestinationResolver  # noqa: E402
from settings import settings  # noqa: E402

logger = logging.getLogger("resolve_city")


def main(argv: Optional[List[str]] = None) -> int:
    parser = argparse.ArgumentParser(description="Resolve a city name into points of interest.")
    parser.add_argument("city", help="City name, passed to the geocoder as-is.")
    parser.add_argument("--category", default=None, help="Only print destinations of this category.")
    parser.add_argument("--page", type=int, default=1)
    parser.add_argument("--page-size", type=int, default=settings.PAGE_SIZE)
    parser.add_argument("--log-level", default="INFO", help="Logging level (DEBUG, INFO, WARNING...).")
    args = parser.parse_args(argv)

    logging.basicConfig(level=args.log_level.upper(), format="%(levelname)s %(name)s: %(message)s")
    if args.page < 1 or args.page_size < 1:
        parser.error("--page and --page-size must be >= 1")

    report = DestinationResolver().resolve_with_report(args.city)
    result = paginate_destinations(
        report.destinations, page=args.page, page_size=args.page_size, category=args.category
    )
    payload = {
        "city": args.city,
        "failure": report.failure.value if report.failure else None,
        "page": result.page,
        "total": result.total,
        "total_pages": result.total_pages,
        "categories": result.categories,
        "destinations": [d.to_dict() for d in result.destinations],
    }
    json.dump(payload, sys.stdout, indent=2, ensure_ascii=False)
    sys.stdout.write("\n")
    return 0 if report.ok else 1


if __name__ == "__main__":
    raise SystemExit(main())

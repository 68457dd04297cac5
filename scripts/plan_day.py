"""Plan a ski day from a topology JSON file and print the plan as JSON.

Developer utility for trying the planner on exported ski-area data.

Topology file format:
    {"ski_area_id": "...", "runs": [...], "lifts": [...]}
with GeoJSON-style [lng, lat(, elevation)] coordinates. An optional status
file adds live open/closed flags and lift opening times:
    {"runs": [{"run_id", "status"}], "lifts": [{"lift_id", "status", "operating_hours"}]}

Run:
    python scripts/plan_day.py topology.json --home 45.93,6.87 --date 2025-02-14 \
        --difficulties easy intermediate --timezone Europe/Paris
"""

import argparse
import json
import logging
import sys
from datetime import date
from pathlib import Path

from sunny_slopes.errors import SunnySlopesError
from sunny_slopes.model import GeoPoint, PlanRequest, SkiAreaTopology, StatusSnapshot
from sunny_slopes.planner import PlannerSettings
from sunny_slopes.service import plan_day

logging.basicConfig(level=logging.INFO)
logger = logging.getLogger(__name__)


def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Plan a sun-aware ski day")
    parser.add_argument("topology", type=Path, help="Topology JSON file")
    parser.add_argument("--status", type=Path, default=None, help="Live status JSON file")
    parser.add_argument("--home", required=True, help="Home location as 'lat,lng'")
    parser.add_argument("--date", required=True, help="Target date (YYYY-MM-DD)")
    parser.add_argument("--difficulties", nargs="+", required=True, help="Difficulties to include")
    parser.add_argument("--timezone", required=True, help="IANA timezone of the resort, e.g. Europe/Paris")
    parser.add_argument("--sun-weight", type=float, default=None)
    parser.add_argument("--detour-weight", type=float, default=None)
    return parser.parse_args(argv)


def main(argv: list[str] | None = None) -> int:
    args = parse_args(argv)

    topology = SkiAreaTopology.from_dict(json.loads(args.topology.read_text(encoding="utf-8")))
    status = None
    if args.status is not None:
        status = StatusSnapshot.from_dict(json.loads(args.status.read_text(encoding="utf-8")))

    try:
        lat, lng = (float(v) for v in args.home.split(","))
    except ValueError:
        logger.error(f"--home must be 'lat,lng', got {args.home!r}")
        return 2

    overrides = {}
    if args.sun_weight is not None:
        overrides["sun_weight"] = args.sun_weight
    if args.detour_weight is not None:
        overrides["detour_weight"] = args.detour_weight

    try:
        request = PlanRequest(
            ski_area_id=topology.ski_area_id,
            difficulties=frozenset(args.difficulties),
            home_location=GeoPoint(lat=lat, lng=lng),
            target_date=date.fromisoformat(args.date),
            timezone=args.timezone,
        )
        plan = plan_day(request=request, topology=topology, status=status, settings=PlannerSettings(**overrides))
    except (SunnySlopesError, ValueError) as e:
        logger.error(str(e))
        return 1

    json.dump(plan.to_dict(), sys.stdout, indent=2)
    sys.stdout.write("\n")
    return 0


if __name__ == "__main__":
    sys.exit(main())

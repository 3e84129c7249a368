"""tripmesh CLI: plan one trip and print ranked options."""

from __future__ import annotations

import argparse
import json
from typing import Optional

from dotenv import load_dotenv

from tripmesh.application.engine import build_engine
from tripmesh.domain.enums import TransportMode
from tripmesh.domain.models import Coordinate, Preferences, Recommendation
from tripmesh.sources import PlanningContext

load_dotenv()


def _parse_point(raw: str) -> Coordinate:
    try:
        lat_text, lon_text = raw.split(",", 1)
        return Coordinate(lat=float(lat_text), lon=float(lon_text))
    except ValueError as exc:
        raise argparse.ArgumentTypeError(f"expected 'lat,lon', got {raw!r}: {exc}") from None


def _format_recommendation(position: int, rec: Recommendation) -> str:
    it = rec.itinerary
    modes = " > ".join(mode.value for mode in it.modes)
    lines = [
        f"{position}. {modes}  |  {it.total_time_min} min  |  INR {it.total_cost_cents / 100:.2f}"
        f"  |  comfort {it.average_comfort_score:.2f}  |  score {rec.score:.4f}  [{it.source}]"
    ]
    for reason in rec.rationale:
        lines.append(f"     - {reason}")
    return "\n".join(lines)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Plan a multimodal trip and rank the options")
    parser.add_argument("origin", type=_parse_point, help="Origin as 'lat,lon'")
    parser.add_argument("destination", type=_parse_point, help="Destination as 'lat,lon'")
    parser.add_argument("--weight-time", type=float, default=None)
    parser.add_argument("--weight-cost", type=float, default=None)
    parser.add_argument("--weight-comfort", type=float, default=None)
    parser.add_argument(
        "--avoid",
        action="append",
        default=[],
        choices=[mode.value for mode in TransportMode],
        help="Mode to exclude (repeatable)",
    )
    parser.add_argument("--max-transfers", type=int, default=None)
    parser.add_argument("--city", default="", help="City hint for the generative source")
    parser.add_argument("--json", action="store_true", help="Print the raw plan as JSON")
    return parser


def main(argv: Optional[list[str]] = None) -> int:
    args = build_parser().parse_args(argv)
    engine = build_engine()

    prefs = engine.get_preferences()
    updates = {
        "weight_time": args.weight_time,
        "weight_cost": args.weight_cost,
        "weight_comfort": args.weight_comfort,
        "max_transfers": args.max_transfers,
    }
    updates = {key: value for key, value in updates.items() if value is not None}
    if args.avoid:
        updates["avoid_modes"] = [TransportMode(mode) for mode in args.avoid]
    prefs = Preferences.model_validate({**prefs.model_dump(), **updates})

    result = engine.plan(args.origin, args.destination, prefs, PlanningContext(city_hint=args.city))
    if args.json:
        print(json.dumps(result.model_dump(mode="json"), ensure_ascii=False, indent=2))
        return 0

    for warning in result.warnings:
        print(f"! {warning}")
    for position, rec in enumerate(engine.recommend(result.itineraries, prefs), start=1):
        print(_format_recommendation(position, rec))
    failed = [r.source for r in result.source_reports if r.status.value != "ok"]
    if failed:
        print(f"(sources without results: {', '.join(failed)})")
    return 0


if __name__ == "__main__":
    raise SystemExit(main())

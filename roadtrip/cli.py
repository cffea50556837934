"""roadtrip-plan CLI 入口：一次規劃並輸出可讀的行程單"""

from __future__ import annotations

import argparse
import json
import sys
from typing import Optional, Sequence

from dotenv import load_dotenv

from roadtrip.application.contracts import parse_plan_request
from roadtrip.application.plan_trip import run_plan_with_timeout
from roadtrip.domain.constants import DEFAULT_DAYS
from roadtrip.domain.models import ItineraryDay, PlanResult, ScoredCandidate
from roadtrip.shared.exceptions import PlannerError

load_dotenv()  # 自動載入 .env

_SLOT_LABELS = {
    "morning": "上午",
    "lunch": "午餐",
    "afternoon": "下午",
    "lodging": "住宿",
}


def _describe(place: ScoredCandidate) -> str:
    rating = f"★{place.rating:.1f}" if place.rating else "尚無評分"
    address = f"  {place.address}" if place.address else ""
    return f"{place.name} ({rating}){address}"


def _format_day(day: ItineraryDay) -> list[str]:
    lines = [f"\n📅 第{day.day_number}天", "-" * 50]
    if not (day.morning or day.afternoon or day.lunch or day.lodging):
        lines.append("  （沿途找不到合適的地點）")
        return lines
    for slot, place in day.placed():
        lines.append(f"  {_SLOT_LABELS[slot.value]}  📍 {_describe(place)}")
    return lines


def format_plan(result: PlanResult) -> str:
    """將 PlanResult 格式化為文字行程單"""
    lines = [
        f"🗺️  {result.start.address or '出發地'} → {result.end.address or '目的地'}",
        "=" * 50,
    ]
    if result.distance_text or result.duration_text:
        lines.append(f"🚗 {result.distance_text}  ⏱ {result.duration_text}  (provider: {result.provider.value})")
    if not result.itinerary:
        lines.append("\n⚠️  未設定 GOOGLE_MAPS_API_KEY，只提供路線摘要，不含景點行程")
    for day in result.itinerary:
        lines.extend(_format_day(day))
    lines.append("\n" + "=" * 50)
    lines.append(f"共 {len(result.pois)} 個候選地點  trace_id={result.trace_id}")
    return "\n".join(lines)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="roadtrip-plan", description="沿開車路線規劃多日行程")
    parser.add_argument("origin", help="出發地")
    parser.add_argument("destination", help="目的地")
    parser.add_argument("--days", type=int, default=DEFAULT_DAYS, help="行程天數 (1-14)")
    parser.add_argument("--json", dest="json_path", metavar="FILE", help="另存完整 JSON 結果")
    return parser


def main(argv: Optional[Sequence[str]] = None) -> int:
    args = build_parser().parse_args(argv)
    try:
        request = parse_plan_request(
            {"origin": args.origin, "destination": args.destination, "days": args.days}
        )
        result = run_plan_with_timeout(request)
    except PlannerError as exc:
        print(f"\n❌ [{exc.kind}] {exc.detail}", file=sys.stderr)
        return 2 if exc.status_code == 400 else 1

    print(format_plan(result))
    if args.json_path:
        with open(args.json_path, "w", encoding="utf-8") as f:
            json.dump(result.model_dump(mode="json"), f, ensure_ascii=False, indent=2)
        print(f"\n--- 原始 JSON 已儲存到 {args.json_path} ---")
    return 0


if __name__ == "__main__":
    sys.exit(main())

"""Deterministic route-sampling, scoring and itinerary algorithms."""

from roadtrip.planner.assembly import assemble_itinerary, selected_place_ids
from roadtrip.planner.scoring import CandidatePool, rank_pool, score_place
from roadtrip.planner.sampling import build_route_path, is_single_city, sample_probes

__all__ = [
    "CandidatePool",
    "assemble_itinerary",
    "build_route_path",
    "is_single_city",
    "rank_pool",
    "sample_probes",
    "score_place",
    "selected_place_ids",
]

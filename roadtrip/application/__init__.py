"""Application orchestration layer."""

from roadtrip.application.contracts import PlanRequest, parse_plan_request
from roadtrip.application.plan_trip import PlanTools, plan_trip, run_plan_with_timeout

__all__ = ["PlanRequest", "PlanTools", "parse_plan_request", "plan_trip", "run_plan_with_timeout"]

"""Points calculation for activity submissions.

Scoring rules, in order of precedence:
  1. Duration table: duration-based sub-activities with a matching duration
  2. Flat level credits: the catalog-wide table (college=3 ... international=15)
  3. Sub-activity level table: fallback for levels missing from the flat table
  4. Zero: nothing matched; reported as defaulted, never raised

The winner flag is part of the call contract but does not change the result.
"""

from .catalog import Catalog
from .models import (
    SOURCE_DEFAULTED, SOURCE_DURATION, SOURCE_LEVEL_CREDIT,
    SOURCE_SUB_ACTIVITY_LEVEL, PointsResult, SubActivity,
)


class PointsEngine:
    """Stateless scorer over an injected, read-only catalog."""

    def __init__(self, catalog: Catalog):
        self.catalog = catalog

    def lookup_category(self, category_id: str):
        return self.catalog.lookup_category(category_id)

    def lookup_sub_activity(self, sub_activity_id: str):
        return self.catalog.lookup_sub_activity(sub_activity_id)

    def list_sub_activities_for_category(self, category_id: str):
        return self.catalog.list_sub_activities_for_category(category_id)

    def score(self, sub_activity: SubActivity, level_id: str, is_winner: bool = False,
              duration: str | None = None) -> PointsResult:
        """Score a selection and report which rule produced the value."""
        if (sub_activity.is_duration_based and duration
                and duration in sub_activity.duration_points):
            return PointsResult(sub_activity.duration_points[duration], SOURCE_DURATION)

        if level_id in self.catalog.level_credits:
            return PointsResult(self.catalog.level_credits[level_id], SOURCE_LEVEL_CREDIT)

        # Shadowed by the flat table for every shipped level
        if level_id in sub_activity.points_by_level:
            return PointsResult(sub_activity.points_by_level[level_id],
                                SOURCE_SUB_ACTIVITY_LEVEL)

        return PointsResult(0, SOURCE_DEFAULTED)

    def compute_points(self, sub_activity: SubActivity, level_id: str,
                       is_winner: bool = False, duration: str | None = None) -> int:
        return self.score(sub_activity, level_id, is_winner, duration).points

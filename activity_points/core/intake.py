"""Submission intake and review.

create_submission turns a student's selection into a scored, pending
Submission; review_submission applies a teacher's decision. Points are
computed once at intake and never revisited.
"""

import datetime
import logging
from dataclasses import replace

from .errors import CategoryMismatch, InvalidLevel, InvalidTransition, MissingCustomName
from .models import (
    STATUS_APPROVED, STATUS_PENDING, STATUS_REJECTED, Submission, SubmissionRequest,
)
from .points_engine import PointsEngine

logger = logging.getLogger(__name__)


def _timestamp(now: datetime.datetime | None) -> str:
    now = now or datetime.datetime.now(datetime.timezone.utc)
    return now.isoformat()


def create_submission(engine: PointsEngine, request: SubmissionRequest,
                      strict_levels: bool = False,
                      now: datetime.datetime | None = None) -> Submission:
    """Validate a selection against the catalog and score it.

    Raises:
        CategoryNotFound / SubActivityNotFound: unknown ids.
        CategoryMismatch: the sub-activity belongs to another category.
        MissingCustomName: a custom sub-activity without a free-text name.
        InvalidLevel: strict_levels is set and no scoring rule matched.
    """
    category = engine.lookup_category(request.category_id)
    sub = engine.lookup_sub_activity(request.sub_activity_id)
    if sub.category_id != category.id:
        raise CategoryMismatch(
            f"Sub-activity {sub.id!r} belongs to category {sub.category_id!r}, "
            f"not {category.id!r}")

    activity_name = sub.name
    if sub.is_custom:
        custom_name = (request.custom_name or '').strip()
        if not custom_name:
            raise MissingCustomName(f"Sub-activity {sub.id!r} requires a custom activity name")
        activity_name = custom_name

    result = engine.score(sub, request.level_id, request.is_winner, request.duration)
    if result.defaulted:
        if strict_levels:
            raise InvalidLevel(
                f"Level {request.level_id!r} does not score for sub-activity {sub.id!r}")
        logger.warning("No scoring rule for %s at level %r; recording 0 points",
                       sub.id, request.level_id)

    return Submission(
        student_id=request.student_id,
        student_name=request.student_name,
        category_id=category.id,
        sub_activity_id=sub.id,
        activity_name=activity_name,
        level_id=request.level_id,
        is_winner=request.is_winner,
        duration=request.duration,
        points=result.points,
        points_source=result.source,
        status=STATUS_PENDING,
        submitted_at=_timestamp(now),
        date=request.date,
        evidence_type=request.evidence_type,
        remarks=request.remarks,
    )


def review_submission(submission: Submission, approve: bool, reviewer: str,
                      remarks: str | None = None,
                      now: datetime.datetime | None = None) -> Submission:
    """Approve or reject a pending submission. Returns the updated record."""
    if submission.status != STATUS_PENDING:
        raise InvalidTransition(
            f"Submission is already {submission.status}; only pending submissions can be reviewed")

    status = STATUS_APPROVED if approve else STATUS_REJECTED
    logger.info("%s %s for %s by %s", status, submission.sub_activity_id,
                submission.student_id, reviewer)
    return replace(
        submission,
        status=status,
        teacher_remarks=remarks or '',
        reviewed_by=reviewer,
        reviewed_at=_timestamp(now),
    )

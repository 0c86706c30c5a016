"""Points totals, program progress and portal-wide statistics.

Only approved submissions count toward a student's total; pending and
rejected ones are tallied separately for display.
"""

from collections import defaultdict

from .models import (
    STATUS_APPROVED, STATUS_PENDING, STATUS_REJECTED, ProgramRequirement, Submission,
)


def summarize_student(submissions: list[Submission], student_id: str) -> dict:
    """Summarize one student's submissions.

    Returns:
        Dict with:
          student_id, student_name
          total_points: sum of approved points
          category_points: {category_id: approved points}
          approved, pending, rejected: submission counts
    """
    category_points = defaultdict(int)
    counts = {STATUS_APPROVED: 0, STATUS_PENDING: 0, STATUS_REJECTED: 0}
    student_name = ''

    for sub in submissions:
        if sub.student_id != student_id:
            continue
        student_name = student_name or sub.student_name
        counts[sub.status] = counts.get(sub.status, 0) + 1
        if sub.status == STATUS_APPROVED:
            category_points[sub.category_id] += sub.points

    return {
        'student_id': student_id,
        'student_name': student_name,
        'total_points': sum(category_points.values()),
        'category_points': dict(category_points),
        'approved': counts[STATUS_APPROVED],
        'pending': counts[STATUS_PENDING],
        'rejected': counts[STATUS_REJECTED],
    }


def evaluate_progress(summary: dict, requirement: ProgramRequirement) -> dict:
    """Compare a student summary against a program's requirements.

    Returns:
        Dict with:
          program, total_points, total_required, total_shortfall
          categories: [{category_id, earned, minimum, shortfall}] in the
                      requirement's category order
          complete: True when the total and every category minimum are met
    """
    earned = summary['category_points']
    categories = []
    for category_id, minimum in requirement.category_minimums.items():
        points = earned.get(category_id, 0)
        categories.append({
            'category_id': category_id,
            'earned': points,
            'minimum': minimum,
            'shortfall': max(minimum - points, 0),
        })

    total_shortfall = max(requirement.total_required - summary['total_points'], 0)
    complete = total_shortfall == 0 and all(c['shortfall'] == 0 for c in categories)

    return {
        'program': requirement.program,
        'total_points': summary['total_points'],
        'total_required': requirement.total_required,
        'total_shortfall': total_shortfall,
        'categories': categories,
        'complete': complete,
    }


def portal_stats(submissions: list[Submission]) -> dict:
    """Aggregate counts across every student (admin dashboard numbers)."""
    stats = {
        'total_submissions': len(submissions),
        'approved': 0,
        'pending': 0,
        'rejected': 0,
        'total_points_awarded': 0,
        'students': len({s.student_id for s in submissions}),
    }
    for sub in submissions:
        if sub.status in (STATUS_APPROVED, STATUS_PENDING, STATUS_REJECTED):
            stats[sub.status] += 1
        if sub.status == STATUS_APPROVED:
            stats['total_points_awarded'] += sub.points
    return stats


def student_ids(submissions: list[Submission]) -> list[str]:
    """Distinct student ids in first-seen order."""
    seen = {}
    for sub in submissions:
        seen.setdefault(sub.student_id, None)
    return list(seen)

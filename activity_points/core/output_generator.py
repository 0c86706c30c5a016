"""Text outputs for scored activity submissions.

Generates two output types:
  - Points CSV (one row per submission with its score and status)
  - Progress report (per student, category totals against program minimums)
"""

import csv

from .catalog import Catalog
from .errors import LevelNotFound
from .models import ProgramRequirement, Submission
from .progress import evaluate_progress, student_ids, summarize_student


CSV_FIELDS = [
    'student_id', 'student_name', 'category', 'sub_activity_id', 'activity_name',
    'level', 'duration', 'winner', 'points', 'points_source', 'status',
]


def generate_points_csv(submissions: list[Submission], catalog: Catalog, output_path: str):
    """Write one CSV row per submission, sorted by student then category."""
    rows = []
    for sub in submissions:
        rows.append({
            'student_id': sub.student_id,
            'student_name': sub.student_name,
            'category': catalog.lookup_category(sub.category_id).name,
            'sub_activity_id': sub.sub_activity_id,
            'activity_name': sub.activity_name,
            'level': _level_name(catalog, sub.level_id),
            'duration': catalog.duration_name(sub.duration) if sub.duration else '',
            'winner': 'TRUE' if sub.is_winner else 'FALSE',
            'points': sub.points,
            'points_source': sub.points_source,
            'status': sub.status,
        })

    # Stable sort keeps submission order within a student+category
    rows.sort(key=lambda r: (r['student_id'], r['category']))

    with open(output_path, 'w', newline='') as f:
        writer = csv.DictWriter(f, fieldnames=CSV_FIELDS)
        writer.writeheader()
        writer.writerows(rows)


def generate_progress_report(submissions: list[Submission], catalog: Catalog,
                             requirement: ProgramRequirement, output_path: str):
    """Write a plain-text progress section for each student."""
    lines = []
    for student_id in student_ids(submissions):
        summary = summarize_student(submissions, student_id)
        progress = evaluate_progress(summary, requirement)

        header = student_id
        if summary['student_name']:
            header = f"{summary['student_name']} ({student_id})"

        lines.append('')
        lines.append('=' * 60)
        lines.append(f'  {header}')
        lines.append('=' * 60)
        lines.append(f"  Program: {progress['program']}")
        lines.append(f"  Total: {progress['total_points']} / {progress['total_required']}")

        for cat in progress['categories']:
            name = catalog.lookup_category(cat['category_id']).name
            mark = 'OK' if cat['shortfall'] == 0 else f"needs {cat['shortfall']}"
            lines.append(f"    {cat['category_id']} {name}: "
                         f"{cat['earned']} / {cat['minimum']} ({mark})")

        lines.append(f"  Submissions: {summary['approved']} approved, "
                     f"{summary['pending']} pending, {summary['rejected']} rejected")
        lines.append(f"  Status: {'COMPLETE' if progress['complete'] else 'IN PROGRESS'}")
        lines.append('')

    with open(output_path, 'w') as f:
        f.write('\n'.join(lines))


def _level_name(catalog: Catalog, level_id: str) -> str:
    try:
        return catalog.lookup_level(level_id).name
    except LevelNotFound:
        return level_id

"""Tests for per-student totals, program progress and portal stats."""

import pytest

from activity_points.core.intake import create_submission, review_submission
from activity_points.core.models import SubmissionRequest
from activity_points.core.progress import (
    evaluate_progress, portal_stats, student_ids, summarize_student,
)


@pytest.fixture
def submissions(engine):
    def make(student_id, sub_activity_id, level_id, duration=None, approve=True):
        request = SubmissionRequest(
            student_id=student_id, student_name=f'Student {student_id}',
            category_id=sub_activity_id[0], sub_activity_id=sub_activity_id,
            level_id=level_id, duration=duration)
        sub = create_submission(engine, request)
        if approve is None:
            return sub
        return review_submission(sub, approve=approve, reviewer='FAC001')

    return [
        make('S1', 'A1', 'state'),                       # 10
        make('S1', 'A5', 'international'),               # 15
        make('S1', 'C1', 'college', 'one_semester'),     # 12
        make('S1', 'B1', 'district', approve=False),     # rejected
        make('S1', 'D2', 'national', approve=None),      # pending
        make('S2', 'E1', 'college'),                     # 3
    ]


class TestSummarizeStudent:
    def test_totals_count_only_approved(self, submissions):
        summary = summarize_student(submissions, 'S1')
        assert summary['total_points'] == 37
        assert summary['category_points'] == {'A': 25, 'C': 12}
        assert (summary['approved'], summary['pending'], summary['rejected']) == (3, 1, 1)
        assert summary['student_name'] == 'Student S1'

    def test_unknown_student(self, submissions):
        summary = summarize_student(submissions, 'S9')
        assert summary['total_points'] == 0
        assert summary['category_points'] == {}


class TestEvaluateProgress:
    def test_btech_shortfalls(self, catalog, submissions):
        progress = evaluate_progress(summarize_student(submissions, 'S1'),
                                     catalog.lookup_program('B.Tech'))
        assert progress['total_required'] == 60
        assert progress['total_shortfall'] == 23
        by_cat = {c['category_id']: c for c in progress['categories']}
        assert [c['category_id'] for c in progress['categories']] == ['A', 'B', 'C', 'D', 'E']
        assert by_cat['A']['shortfall'] == 0
        assert by_cat['B']['shortfall'] == 10
        assert by_cat['C']['earned'] == 12
        assert not progress['complete']

    def test_complete_when_all_minimums_met(self, catalog):
        requirement = catalog.lookup_program('BCA')
        summary = {'total_points': 50,
                   'category_points': {'A': 12, 'B': 8, 'C': 10, 'D': 10, 'E': 10}}
        progress = evaluate_progress(summary, requirement)
        assert progress['complete']
        assert progress['total_shortfall'] == 0

    def test_total_met_but_category_short(self, catalog):
        requirement = catalog.lookup_program('BCA')
        summary = {'total_points': 80, 'category_points': {'A': 80}}
        assert not evaluate_progress(summary, requirement)['complete']


class TestPortalStats:
    def test_counts(self, submissions):
        stats = portal_stats(submissions)
        assert stats == {
            'total_submissions': 6,
            'approved': 4,
            'pending': 1,
            'rejected': 1,
            'total_points_awarded': 40,
            'students': 2,
        }

    def test_empty(self):
        assert portal_stats([])['total_points_awarded'] == 0

    def test_student_ids_first_seen_order(self, submissions):
        reordered = submissions[-1:] + submissions[:-1]
        assert student_ids(reordered) == ['S2', 'S1']

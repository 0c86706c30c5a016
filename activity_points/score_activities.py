#!/usr/bin/env python3
"""CLI entry point for scoring a batch of activity submissions.

Usage:
    python -m activity_points.score_activities --data requests.csv \\
        --program B.Tech --institution "Example Institute of Technology" \\
        --output ./output/
"""

import argparse
import datetime
import logging
import os
import sys

from activity_points.adapters.generic_adapter import GenericAdapter
from activity_points.core.catalog import load_catalog
from activity_points.core.errors import ActivityPointsError
from activity_points.core.intake import create_submission, review_submission
from activity_points.core.models import SOURCE_DEFAULTED, RunConfig, SubmissionRequest
from activity_points.core.output_generator import (
    generate_points_csv, generate_progress_report
)
from activity_points.core.pdf_generator import generate_statement_pdf
from activity_points.core.points_engine import PointsEngine
from activity_points.core.progress import portal_stats


def score_requests(engine: PointsEngine, requests: list[dict], config: RunConfig):
    """Score parsed request dicts. Returns (submissions, rejected).

    rejected is a list of (request dict, error message) pairs.
    """
    submissions = []
    rejected = []
    for raw in requests:
        try:
            submission = create_submission(engine, SubmissionRequest(**raw),
                                           strict_levels=config.strict_levels)
        except ActivityPointsError as e:
            rejected.append((raw, str(e)))
            continue
        if config.auto_approve:
            submission = review_submission(submission, approve=True, reviewer='PREVIEW')
        submissions.append(submission)
    return submissions, rejected


def main(argv=None):
    parser = argparse.ArgumentParser(description='Score a batch of activity submissions')
    parser.add_argument('--data', nargs='+', required=True,
                        help='Submission request file(s): JSON, TSV or CSV')
    parser.add_argument('--output', required=True, help='Output directory for generated files')
    parser.add_argument('--program', default='B.Tech',
                        help='Program whose requirements progress is measured against')
    parser.add_argument('--catalog', default=None,
                        help='Path to an alternate catalog JSON (default: embedded catalog)')
    parser.add_argument('--strict-levels', action='store_true',
                        help='Reject requests whose level does not score instead of recording 0 points')
    parser.add_argument('--auto-approve', action='store_true',
                        help='Treat every scored submission as approved (preview totals)')
    parser.add_argument('--institution', default='', help='Institution name for statement titles')
    parser.add_argument('--year', default=str(datetime.datetime.now().year),
                        help='Academic year for statement titles (default: current year)')

    args = parser.parse_args(argv)
    logging.basicConfig(level=logging.WARNING, format='%(levelname)s %(name)s: %(message)s')

    config = RunConfig(
        program=args.program,
        catalog_path=args.catalog,
        strict_levels=args.strict_levels,
        institution=args.institution,
        year=args.year,
        auto_approve=args.auto_approve,
    )

    try:
        catalog = load_catalog(config.catalog_path)
        requirement = catalog.lookup_program(config.program)
    except ActivityPointsError as e:
        print(f"Error: {e}")
        return 1
    print(f"Loaded catalog {catalog.version} "
          f"({len(catalog.categories)} categories, {len(catalog.sub_activities)} sub-activities)")

    engine = PointsEngine(catalog)
    adapter = GenericAdapter()

    requests = []
    for data_path in args.data:
        print(f"Parsing {data_path}...")
        batch = adapter.parse(data_path)
        print(f"  -> {len(batch)} requests")
        requests.extend(batch)

    submissions, rejected = score_requests(engine, requests, config)
    print(f"Scored {len(submissions)} submissions")
    if rejected:
        print(f"Rejected {len(rejected)} requests:")
        for raw, reason in rejected:
            print(f"  {raw['student_id']} {raw['sub_activity_id']}: {reason}")

    defaulted = [s for s in submissions if s.points_source == SOURCE_DEFAULTED]
    if defaulted:
        print(f"Warning: {len(defaulted)} submissions scored 0 points (no matching rule)")

    os.makedirs(args.output, exist_ok=True)

    csv_path = os.path.join(args.output, 'activity_points.csv')
    generate_points_csv(submissions, catalog, csv_path)
    print(f"Generated {csv_path}")

    report_path = os.path.join(args.output, 'progress_report.txt')
    generate_progress_report(submissions, catalog, requirement, report_path)
    print(f"Generated {report_path}")

    pdf_path = os.path.join(args.output, 'points_statements.pdf')
    generate_statement_pdf(submissions, catalog, requirement, pdf_path,
                           institution=config.institution, year=config.year)
    print(f"Generated {pdf_path}")

    stats = portal_stats(submissions)
    print(f"\n{stats['students']} students, {stats['approved']} approved, "
          f"{stats['pending']} pending, {stats['total_points_awarded']} points awarded")
    print("\nDone!")
    return 0


if __name__ == '__main__':
    sys.exit(main())

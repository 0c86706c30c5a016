"""Tests for the request adapter, text/CSV outputs, PDF statements and CLI."""

import csv
import os

import fitz  # PyMuPDF
import pytest

from activity_points.adapters.generic_adapter import (
    GenericAdapter, normalize_duration, normalize_level,
)
from activity_points.core.models import RunConfig
from activity_points.core.output_generator import (
    generate_points_csv, generate_progress_report,
)
from activity_points.core.pdf_generator import generate_statement_pdf, pdf_text
from activity_points.score_activities import main, score_requests


@pytest.fixture(scope='module')
def json_requests(reference_dir):
    return GenericAdapter().parse(os.path.join(reference_dir, 'requests.json'))


@pytest.fixture
def scored(engine, json_requests):
    submissions, rejected = score_requests(engine, json_requests, RunConfig(auto_approve=True))
    return submissions, rejected


class TestGenericAdapter:
    def test_json_parse(self, json_requests):
        # The row without a student id is skipped
        assert len(json_requests) == 5
        first = json_requests[0]
        assert first['student_id'] == 'EN2021001'
        assert first['sub_activity_id'] == 'A1'
        assert first['level_id'] == 'state'
        assert first['is_winner'] is False
        assert first['duration'] is None

    def test_json_aliases(self, json_requests):
        custom = json_requests[2]
        assert custom['custom_name'] == 'Open Source Sprint'
        assert custom['is_winner'] is True
        assert json_requests[3]['level_id'] == 'inter_college'

    def test_tsv_parse(self, reference_dir):
        rows = GenericAdapter().parse(os.path.join(reference_dir, 'requests.tsv'))
        assert len(rows) == 3
        assert rows[0]['student_name'] == 'Kiran Rao'
        assert rows[0]['category_id'] == 'C'
        assert rows[0]['duration'] == 'one_semester'
        assert rows[1]['is_winner'] is True
        assert rows[2]['sub_activity_id'] == 'B4'
        assert rows[2]['level_id'] == 'inter_college'
        assert rows[2]['duration'] is None

    def test_csv_parse(self, reference_dir):
        rows = GenericAdapter().parse(os.path.join(reference_dir, 'requests.csv'))
        assert [r['sub_activity_id'] for r in rows] == ['A5', 'E_OTHER', 'Z9', 'C2']
        assert rows[0]['is_winner'] is True

    def test_glob(self, reference_dir):
        rows = GenericAdapter().parse(os.path.join(reference_dir, 'requests.*'))
        assert len(rows) == 12

    def test_label_normalization(self):
        assert normalize_level('Different College') == 'inter_college'
        assert normalize_level('  National ') == 'national'
        assert normalize_duration('One Semester/Year') == 'one_semester'
        assert normalize_duration('Two Days') == 'two_days'
        assert normalize_duration('') == ''


class TestScoreRequests:
    def test_rejections_are_collected(self, scored):
        submissions, rejected = scored
        assert len(submissions) == 4
        assert len(rejected) == 1
        raw, reason = rejected[0]
        assert raw['sub_activity_id'] == 'A2'
        assert 'belongs to category' in reason

    def test_points(self, scored):
        submissions, _ = scored
        assert [s.points for s in submissions] == [10, 6, 12, 5]
        assert all(s.status == 'approved' for s in submissions)

    def test_csv_rejections(self, engine, reference_dir):
        rows = GenericAdapter().parse(os.path.join(reference_dir, 'requests.csv'))
        submissions, rejected = score_requests(engine, rows, RunConfig())
        assert [s.sub_activity_id for s in submissions] == ['A5', 'C2']
        assert submissions[1].points == 0
        assert len(rejected) == 2

        strict, strict_rejected = score_requests(engine, rows, RunConfig(strict_levels=True))
        assert [s.sub_activity_id for s in strict] == ['A5']
        assert len(strict_rejected) == 3


class TestTextOutputs:
    def test_points_csv(self, catalog, scored, tmp_path):
        submissions, _ = scored
        output = str(tmp_path / 'points.csv')
        generate_points_csv(submissions, catalog, output)
        with open(output, newline='') as f:
            rows = list(csv.DictReader(f))
        assert len(rows) == 4
        c1 = next(r for r in rows if r['sub_activity_id'] == 'C1')
        assert c1['category'] == 'Community Outreach'
        assert c1['duration'] == 'One Week'
        assert c1['points'] == '6'
        d1 = next(r for r in rows if r['sub_activity_id'] == 'D1')
        assert d1['level'] == 'Different College'

    def test_progress_report(self, catalog, scored, tmp_path):
        submissions, _ = scored
        output = str(tmp_path / 'progress.txt')
        generate_progress_report(submissions, catalog,
                                 catalog.lookup_program('B.Tech'), output)
        with open(output) as f:
            content = f.read()
        assert 'Asha Patil (EN2021001)' in content
        assert 'Total: 28 / 60' in content
        assert 'A Technical Skills: 22 / 15 (OK)' in content
        assert 'D Innovation/IPR/Entrepreneurship: 5 / 10 (needs 5)' in content
        assert 'IN PROGRESS' in content


class TestStatementPdf:
    def test_one_page_per_student(self, catalog, scored, tmp_path):
        submissions, _ = scored
        output = str(tmp_path / 'statements.pdf')
        generate_statement_pdf(submissions, catalog, catalog.lookup_program('B.Tech'),
                               output, institution='Example Institute', year='2024')
        doc = fitz.open(output)
        try:
            assert doc.page_count == 2
            text = doc[0].get_text()
            assert 'EN2021001' in text
            assert '28 / 60 POINTS' in text
            assert 'Open Source Sprint' in text
        finally:
            doc.close()

    def test_text_outside_latin1_is_replaced(self):
        assert pdf_text('Zoë Müller') == 'Zoë Müller'
        assert pdf_text('Anand \u0906\u0928\u0902\u0926') == 'Anand ????'
        assert pdf_text(None) == ''

    def test_non_latin_name(self, engine, catalog, tmp_path):
        submissions, _ = score_requests(engine, [{
            'student_id': 'EN2021009', 'student_name': '\u5f20\u4f1f',
            'category_id': 'A', 'sub_activity_id': 'A1', 'level_id': 'state',
        }], RunConfig(auto_approve=True))
        output = str(tmp_path / 'non_latin.pdf')
        generate_statement_pdf(submissions, catalog, catalog.lookup_program('B.Tech'), output)
        doc = fitz.open(output)
        try:
            text = doc[0].get_text()
            assert '??' in text
            assert 'EN2021009' in text
            assert '\u5f20' not in text
            assert '10 / 60 POINTS' in text
        finally:
            doc.close()

    def test_empty_batch(self, catalog, tmp_path):
        output = str(tmp_path / 'empty.pdf')
        generate_statement_pdf([], catalog, catalog.lookup_program('MBA'), output)
        doc = fitz.open(output)
        try:
            assert doc.page_count == 1
        finally:
            doc.close()


class TestCli:
    def test_end_to_end(self, reference_dir, tmp_path, capsys):
        out_dir = tmp_path / 'out'
        code = main([
            '--data', os.path.join(reference_dir, 'requests.json'),
            os.path.join(reference_dir, 'requests.tsv'),
            '--output', str(out_dir),
            '--program', 'BCA',
            '--auto-approve',
        ])
        assert code == 0
        for name in ('activity_points.csv', 'progress_report.txt', 'points_statements.pdf'):
            assert (out_dir / name).exists()
        printed = capsys.readouterr().out
        assert 'Scored 7 submissions' in printed
        assert 'Rejected 1 requests' in printed

    def test_unknown_program(self, reference_dir, tmp_path, capsys):
        code = main(['--data', os.path.join(reference_dir, 'requests.json'),
                     '--output', str(tmp_path), '--program', 'PhD'])
        assert code == 1
        assert 'Unknown program' in capsys.readouterr().out

    def test_missing_catalog_file(self, reference_dir, tmp_path, capsys):
        code = main(['--data', os.path.join(reference_dir, 'requests.json'),
                     '--output', str(tmp_path / 'out'),
                     '--catalog', str(tmp_path / 'nope.json')])
        assert code == 1
        printed = capsys.readouterr().out
        assert printed.startswith('Error: Cannot read catalog')
        assert not (tmp_path / 'out').exists()

"""Adapter for submission requests exported as JSON, TSV or CSV.

Handles three formats:
  - JSON: Array of objects (or a single object) with keys like studentId,
          categoryId, subActivityId, level, isWinner, duration
  - TSV: Header row with column names, tab-separated values
  - CSV: Header row with column names, comma-separated values

Columns are matched by name (case-insensitive, spaces/underscores ignored).
Level and duration values are normalized from their display labels
("Different College" -> inter_college, "One Semester/Year" -> one_semester).
"""

import csv
import glob
import io
import json
import os
import re
from .base import BaseAdapter


# Map common column name variations to our canonical names
COLUMN_ALIASES = {
    'studentid': 'student_id',
    'student': 'student_id',
    'enrollmentnumber': 'student_id',
    'enrollment': 'student_id',
    'studentname': 'student_name',
    'name': 'student_name',
    'categoryid': 'category_id',
    'category': 'category_id',
    'subactivityid': 'sub_activity_id',
    'subactivity': 'sub_activity_id',
    'activity': 'sub_activity_id',
    'level': 'level_id',
    'levelid': 'level_id',
    'iswinner': 'is_winner',
    'winner': 'is_winner',
    'duration': 'duration',
    'customactivityname': 'custom_name',
    'customname': 'custom_name',
    'activityname': 'custom_name',
    'date': 'date',
    'startdate': 'date',
    'evidencetype': 'evidence_type',
    'evidence': 'evidence_type',
    'remarks': 'remarks',
}

# Display labels that do not collapse to the level id on their own
LEVEL_ALIASES = {
    'different_college': 'inter_college',
    'intercollege': 'inter_college',
    'inter_collegiate': 'inter_college',
    'intl': 'international',
}

DURATION_ALIASES = {
    'one_semester_year': 'one_semester',
    'one_year': 'one_semester',
    'semester': 'one_semester',
    '2_days': 'two_days',
    '1_week': 'one_week',
    '1_month': 'one_month',
}

_TRUE_VALUES = {'true', 'yes', 'y', '1', 'winner'}


class GenericAdapter(BaseAdapter):
    """Parse submission request files."""

    def parse(self, data_path: str) -> list[dict]:
        """Auto-detect format (JSON vs TSV vs CSV) and parse.

        data_path can be:
          - A single file
          - A directory (all .json files inside are loaded and merged)
          - A glob pattern (e.g. /path/to/exports/requests_*.csv)
        """
        if os.path.isdir(data_path):
            all_requests = []
            for fpath in sorted(glob.glob(os.path.join(data_path, '*.json'))):
                all_requests.extend(self._parse_single_file(fpath))
            return all_requests

        if '*' in data_path or '?' in data_path:
            all_requests = []
            for fpath in sorted(glob.glob(data_path)):
                all_requests.extend(self._parse_single_file(fpath))
            return all_requests

        return self._parse_single_file(data_path)

    def _parse_single_file(self, data_path: str) -> list[dict]:
        """Parse a single data file."""
        with open(data_path, 'r', encoding='utf-8-sig') as f:
            content = f.read().strip()

        if content.startswith('[') or content.startswith('{'):
            try:
                data = json.loads(content)
                if isinstance(data, list):
                    return self._parse_rows(data)
                elif isinstance(data, dict):
                    return self._parse_rows([data])
            except json.JSONDecodeError:
                pass

        first_line = content.split('\n', 1)[0]
        delimiter = '\t' if '\t' in first_line else ','
        reader = csv.DictReader(io.StringIO(content), delimiter=delimiter)
        return self._parse_rows(list(reader))

    def _parse_rows(self, rows: list) -> list[dict]:
        """Map raw rows onto canonical request dicts, skipping incomplete ones."""
        requests = []
        for row in rows:
            if not isinstance(row, dict):
                continue

            mapped = {}
            for key, value in row.items():
                if key is None:
                    continue
                canonical = COLUMN_ALIASES.get(
                    str(key).lower().replace(' ', '').replace('_', '').replace('-', ''))
                if canonical and canonical not in mapped:
                    mapped[canonical] = value

            student_id = self._clean(mapped.get('student_id'))
            sub_activity_id = self._clean(mapped.get('sub_activity_id')).upper()
            if not student_id or not sub_activity_id:
                continue

            # Category defaults to the sub-activity's prefix ("C1" -> "C")
            category_id = self._clean(mapped.get('category_id')).upper() or sub_activity_id[:1]

            requests.append({
                'student_id': student_id,
                'student_name': self._clean(mapped.get('student_name')),
                'category_id': category_id,
                'sub_activity_id': sub_activity_id,
                'level_id': normalize_level(self._clean(mapped.get('level_id'))),
                'is_winner': self._parse_bool(mapped.get('is_winner')),
                'duration': normalize_duration(self._clean(mapped.get('duration'))) or None,
                'custom_name': self._clean(mapped.get('custom_name')),
                'date': self._clean(mapped.get('date')),
                'evidence_type': self._clean(mapped.get('evidence_type')),
                'remarks': self._clean(mapped.get('remarks')),
            })

        return requests

    @staticmethod
    def _clean(val) -> str:
        if val is None:
            return ''
        return str(val).strip()

    @staticmethod
    def _parse_bool(val) -> bool:
        if isinstance(val, bool):
            return val
        if val is None:
            return False
        return str(val).strip().lower() in _TRUE_VALUES


def _slug(label: str) -> str:
    """'Different College' -> 'different_college', 'One Semester/Year' -> 'one_semester_year'."""
    return re.sub(r'[^a-z0-9]+', '_', label.strip().lower()).strip('_')


def normalize_level(label: str) -> str:
    slug = _slug(label)
    return LEVEL_ALIASES.get(slug, slug)


def normalize_duration(label: str) -> str:
    slug = _slug(label)
    return DURATION_ALIASES.get(slug, slug)

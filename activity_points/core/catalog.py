"""Activity catalog: categories, levels, sub-activities and program rules.

The catalog is a versioned JSON dataset shipped with the package
(data/catalog_v1.json). It is loaded once into an immutable Catalog and
passed to whatever needs it; nothing here holds module-level state.
"""

import json
import os
from dataclasses import dataclass, field
from types import MappingProxyType

from .errors import (
    CatalogError, CategoryNotFound, LevelNotFound, ProgramNotFound,
    SubActivityNotFound,
)
from .models import (
    Category, DurationBucket, ParticipationLevel, ProgramRequirement,
    SubActivity,
)


DEFAULT_CATALOG_PATH = os.path.join(
    os.path.dirname(os.path.dirname(os.path.abspath(__file__))),
    'data', 'catalog_v1.json',
)


@dataclass(frozen=True)
class Catalog:
    """Immutable snapshot of the scoring ruleset."""
    version: str
    categories: tuple
    levels: tuple
    sub_activities: tuple
    level_credits: MappingProxyType
    durations: tuple = ()
    programs: tuple = ()
    _index: dict = field(init=False, repr=False, compare=False)

    def __post_init__(self):
        object.__setattr__(self, 'categories', tuple(self.categories))
        object.__setattr__(self, 'levels', tuple(self.levels))
        object.__setattr__(self, 'sub_activities', tuple(self.sub_activities))
        object.__setattr__(self, 'durations', tuple(self.durations))
        object.__setattr__(self, 'programs', tuple(self.programs))
        object.__setattr__(self, 'level_credits', MappingProxyType(dict(self.level_credits)))

        by_category = {}
        for sub in self.sub_activities:
            by_category.setdefault(sub.category_id, []).append(sub)

        object.__setattr__(self, '_index', {
            'categories': {c.id: c for c in self.categories},
            'levels': {lv.id: lv for lv in self.levels},
            'sub_activities': {s.id: s for s in self.sub_activities},
            'durations': {d.id: d for d in self.durations},
            'programs': {p.program: p for p in self.programs},
            'by_category': {k: tuple(v) for k, v in by_category.items()},
        })

    def lookup_category(self, category_id: str) -> Category:
        try:
            return self._index['categories'][category_id]
        except KeyError:
            raise CategoryNotFound(category_id) from None

    def lookup_sub_activity(self, sub_activity_id: str) -> SubActivity:
        try:
            return self._index['sub_activities'][sub_activity_id]
        except KeyError:
            raise SubActivityNotFound(sub_activity_id) from None

    def lookup_level(self, level_id: str) -> ParticipationLevel:
        try:
            return self._index['levels'][level_id]
        except KeyError:
            raise LevelNotFound(level_id) from None

    def lookup_program(self, program: str) -> ProgramRequirement:
        try:
            return self._index['programs'][program]
        except KeyError:
            raise ProgramNotFound(program) from None

    def list_sub_activities_for_category(self, category_id: str) -> list[SubActivity]:
        """Sub-activities of a category in declaration order.

        Unknown categories yield an empty list rather than an error.
        """
        return list(self._index['by_category'].get(category_id, ()))

    def custom_sub_activity(self, category_id: str) -> SubActivity:
        """The "Other ..." entry of a category."""
        for sub in self.list_sub_activities_for_category(category_id):
            if sub.is_custom:
                return sub
        raise SubActivityNotFound(f'{category_id} (custom)')

    def duration_name(self, duration_id: str) -> str:
        bucket = self._index['durations'].get(duration_id)
        return bucket.name if bucket else duration_id


def load_catalog(path: str | None = None) -> Catalog:
    """Load and validate a catalog JSON file (the embedded one by default)."""
    path = path or DEFAULT_CATALOG_PATH
    try:
        with open(path, 'r', encoding='utf-8') as f:
            raw = json.load(f)
    except json.JSONDecodeError as e:
        raise CatalogError(f"Catalog {path} is not valid JSON: {e}") from e
    except (OSError, UnicodeDecodeError) as e:
        raise CatalogError(f"Cannot read catalog {path}: {e}") from e

    catalog = catalog_from_dict(raw)
    validate_catalog(catalog)
    return catalog


def catalog_from_dict(raw: dict) -> Catalog:
    """Build a Catalog from the decoded JSON structure.

    Point values must be JSON integers and flags JSON booleans; strings such
    as "false" or floats such as 3.7 are rejected rather than coerced.
    """
    try:
        categories = [
            Category(id=c['id'], name=c['name'], description=c.get('description', ''))
            for c in raw['categories']
        ]
        levels = [
            ParticipationLevel(
                id=lv['id'], name=lv['name'],
                base_points=_as_int(lv['base_points'], f"level {lv['id']!r} base_points"),
                winner_bonus=_as_int(lv.get('winner_bonus', 0),
                                     f"level {lv['id']!r} winner_bonus"))
            for lv in raw['levels']
        ]
        durations = [
            DurationBucket(id=d['id'], name=d['name'])
            for d in raw.get('durations', [])
        ]
        sub_activities = [
            SubActivity(
                id=s['id'],
                name=s['name'],
                category_id=s['category_id'],
                evidence_required=s.get('evidence_required', []),
                points_by_level=_int_map(s.get('points_by_level', {}),
                                         f"sub-activity {s['id']!r} points_by_level"),
                is_duration_based=_as_bool(s.get('is_duration_based', False),
                                           f"sub-activity {s['id']!r} is_duration_based"),
                duration_points=_int_map(s.get('duration_points', {}),
                                         f"sub-activity {s['id']!r} duration_points"),
                is_custom=_as_bool(s.get('is_custom', False),
                                   f"sub-activity {s['id']!r} is_custom"),
            )
            for s in raw['sub_activities']
        ]
        programs = [
            ProgramRequirement(
                program=p['program'],
                total_required=_as_int(p['total_required'],
                                       f"program {p['program']!r} total_required"),
                category_minimums=_int_map(p.get('category_minimums', {}),
                                           f"program {p['program']!r} category_minimums"),
            )
            for p in raw.get('programs', [])
        ]
        level_credits = _int_map(raw['level_credits'], 'level_credits')
    except (KeyError, TypeError, ValueError, AttributeError) as e:
        raise CatalogError(f"Malformed catalog entry: {e!r}") from e

    return Catalog(
        version=str(raw.get('version', '')),
        categories=categories,
        levels=levels,
        sub_activities=sub_activities,
        level_credits=level_credits,
        durations=durations,
        programs=programs,
    )


def validate_catalog(catalog: Catalog) -> None:
    """Check referential integrity of the dataset. Raises CatalogError."""
    _check_unique('category', [c.id for c in catalog.categories])
    _check_unique('level', [lv.id for lv in catalog.levels])
    _check_unique('sub-activity', [s.id for s in catalog.sub_activities])
    _check_unique('duration', [d.id for d in catalog.durations])
    _check_unique('program', [p.program for p in catalog.programs])

    # Levels are ordered tiers with strictly increasing base points
    for prev, cur in zip(catalog.levels, catalog.levels[1:]):
        if cur.base_points <= prev.base_points:
            raise CatalogError(
                f"Level {cur.id!r} ({cur.base_points}) does not outrank "
                f"{prev.id!r} ({prev.base_points})")

    # Awards are never negative
    for lv in catalog.levels:
        _check_non_negative(f"level {lv.id!r} base_points", lv.base_points)
        _check_non_negative(f"level {lv.id!r} winner_bonus", lv.winner_bonus)
    for level_id, value in catalog.level_credits.items():
        _check_non_negative(f"level_credits[{level_id!r}]", value)
    for sub in catalog.sub_activities:
        for level_id, value in sub.points_by_level.items():
            _check_non_negative(f"sub-activity {sub.id!r} points_by_level[{level_id!r}]", value)
        for duration_id, value in sub.duration_points.items():
            _check_non_negative(f"sub-activity {sub.id!r} duration_points[{duration_id!r}]", value)

    category_ids = {c.id for c in catalog.categories}
    duration_ids = {d.id for d in catalog.durations}

    for sub in catalog.sub_activities:
        if sub.category_id not in category_ids:
            raise CatalogError(
                f"Sub-activity {sub.id!r} references unknown category {sub.category_id!r}")
        if sub.is_duration_based and not sub.duration_points:
            raise CatalogError(f"Sub-activity {sub.id!r} is duration based but has no duration table")
        unknown = set(sub.duration_points) - duration_ids
        if unknown:
            raise CatalogError(
                f"Sub-activity {sub.id!r} uses unknown durations {sorted(unknown)}")

    for category in catalog.categories:
        subs = catalog.list_sub_activities_for_category(category.id)
        if not subs:
            raise CatalogError(f"Category {category.id!r} has no sub-activities")
        custom = [s for s in subs if s.is_custom]
        if len(custom) != 1:
            raise CatalogError(
                f"Category {category.id!r} needs exactly one custom sub-activity, has {len(custom)}")

    for program in catalog.programs:
        unknown = set(program.category_minimums) - category_ids
        if unknown:
            raise CatalogError(
                f"Program {program.program!r} sets minimums for unknown categories {sorted(unknown)}")


def _as_int(value, where: str) -> int:
    # bool is an int subclass; true/false are not point values
    if isinstance(value, bool) or not isinstance(value, int):
        raise CatalogError(f"{where} must be an integer, got {value!r}")
    return value


def _as_bool(value, where: str) -> bool:
    if not isinstance(value, bool):
        raise CatalogError(f"{where} must be true or false, got {value!r}")
    return value


def _int_map(mapping: dict, where: str) -> dict:
    return {k: _as_int(v, f"{where}[{k!r}]") for k, v in mapping.items()}


def _check_non_negative(where: str, value: int) -> None:
    if value < 0:
        raise CatalogError(f"{where} is negative ({value})")


def _check_unique(kind: str, ids: list) -> None:
    seen = set()
    for key in ids:
        if key in seen:
            raise CatalogError(f"Duplicate {kind} id {key!r}")
        seen.add(key)

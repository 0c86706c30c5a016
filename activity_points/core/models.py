"""Data models for the activity points system."""

from dataclasses import dataclass, field
from types import MappingProxyType


STATUS_PENDING = 'pending'
STATUS_APPROVED = 'approved'
STATUS_REJECTED = 'rejected'

# Where a point value came from (see PointsEngine.score)
SOURCE_DURATION = 'duration'
SOURCE_LEVEL_CREDIT = 'level_credit'
SOURCE_SUB_ACTIVITY_LEVEL = 'sub_activity_level'
SOURCE_DEFAULTED = 'defaulted'


def _frozen_mapping(value=None) -> MappingProxyType:
    return MappingProxyType(dict(value or {}))


@dataclass(frozen=True)
class Category:
    """Top-level activity domain, e.g. Technical Skills."""
    id: str                   # "A" .. "E"
    name: str
    description: str = ''


@dataclass(frozen=True)
class ParticipationLevel:
    """Competitive tier an activity took place at."""
    id: str                   # "college", "inter_college", ... "international"
    name: str                 # "Different College"
    base_points: int
    winner_bonus: int = 0     # zero for every shipped level


@dataclass(frozen=True)
class DurationBucket:
    """Elapsed-time choice for duration-based activities."""
    id: str                   # "two_days", "one_week", "one_month", "one_semester"
    name: str


@dataclass(frozen=True)
class SubActivity:
    """A specific activity type within a category, e.g. Hackathon."""
    id: str
    name: str
    category_id: str
    evidence_required: tuple = ()
    points_by_level: MappingProxyType = field(default_factory=_frozen_mapping)
    is_duration_based: bool = False
    duration_points: MappingProxyType = field(default_factory=_frozen_mapping)
    is_custom: bool = False   # "Other ..." placeholder taking a free-text name

    def __post_init__(self):
        # Accept plain dicts/lists from callers building fixtures by hand
        object.__setattr__(self, 'evidence_required', tuple(self.evidence_required))
        object.__setattr__(self, 'points_by_level', _frozen_mapping(self.points_by_level))
        object.__setattr__(self, 'duration_points', _frozen_mapping(self.duration_points))


@dataclass(frozen=True)
class ProgramRequirement:
    """Points a degree program requires overall and per category."""
    program: str              # "B.Tech", "BCA", "MBA", "M.Tech"
    total_required: int
    category_minimums: MappingProxyType = field(default_factory=_frozen_mapping)

    def __post_init__(self):
        object.__setattr__(self, 'category_minimums', _frozen_mapping(self.category_minimums))


@dataclass(frozen=True)
class PointsResult:
    """Outcome of scoring one selection.

    `source` records which rule produced the value so callers can tell a
    real score from the zero fallback.
    """
    points: int
    source: str

    @property
    def defaulted(self) -> bool:
        return self.source == SOURCE_DEFAULTED


@dataclass(frozen=True)
class SubmissionRequest:
    """What a student selects when submitting an activity."""
    student_id: str
    category_id: str
    sub_activity_id: str
    level_id: str
    student_name: str = ''
    is_winner: bool = False
    duration: str | None = None
    custom_name: str = ''     # required when the sub-activity is custom
    date: str = ''
    evidence_type: str = ''
    remarks: str = ''


@dataclass(frozen=True)
class Submission:
    """A scored activity record handed to the persistence layer."""
    student_id: str
    student_name: str
    category_id: str
    sub_activity_id: str
    activity_name: str
    level_id: str
    is_winner: bool
    duration: str | None
    points: int
    points_source: str
    status: str = STATUS_PENDING
    submitted_at: str = ''
    date: str = ''
    evidence_type: str = ''
    remarks: str = ''
    teacher_remarks: str = ''
    reviewed_by: str = ''
    reviewed_at: str = ''


@dataclass
class RunConfig:
    """Configuration for a single batch scoring run."""
    program: str = 'B.Tech'               # requirement set to report progress against
    catalog_path: str | None = None       # None -> embedded catalog
    strict_levels: bool = False           # reject selections that score as defaulted
    institution: str = ''                 # printed on statements
    year: str = ''                        # academic year for titles
    auto_approve: bool = False            # preview totals as if all were approved

"""Exceptions raised by the activity points core.

Scoring itself never raises; these cover catalog lookups, malformed
reference data and incoherent submissions.
"""


class ActivityPointsError(Exception):
    """Base class for all activity points errors."""


class CatalogError(ActivityPointsError):
    """The catalog dataset is malformed or violates referential integrity."""


class NotFound(ActivityPointsError, LookupError):
    """An id is not present in the catalog."""

    kind = 'entry'

    def __init__(self, key: str):
        self.key = key
        super().__init__(f"Unknown {self.kind}: {key!r}")


class CategoryNotFound(NotFound):
    kind = 'category'


class SubActivityNotFound(NotFound):
    kind = 'sub-activity'


class LevelNotFound(NotFound):
    kind = 'level'


class ProgramNotFound(NotFound):
    kind = 'program'


class ValidationError(ActivityPointsError, ValueError):
    """A submission request is not coherent with the catalog."""


class CategoryMismatch(ValidationError):
    pass


class MissingCustomName(ValidationError):
    pass


class InvalidLevel(ValidationError):
    pass


class InvalidTransition(ValidationError):
    pass

"""Error taxonomy for activity ingestion.

Per-record errors (``RecordError``) are recovered inside the pipeline and only
reach the diagnostic sink. Source errors (``SourceError``) abort the run.
"""


class ActivityError(Exception):
    """Base class for every error raised by repo_activity."""


class RecordError(ActivityError):
    """A single record was rejected. Never fatal to the run."""

    error_type = "record_error"


class ShapeError(RecordError):
    """Too few fields, or an empty required field."""

    error_type = "shape_error"


class RecordValueError(RecordError, ValueError):
    """A numeric field is not a base-10 integer or is negative."""

    error_type = "value_error"

    def __init__(self, field: str, value: str, reason: str):
        super().__init__(f"invalid {field} value {value!r}: {reason}")
        self.field = field
        self.value = value


class SourceError(ActivityError):
    """The source could not be read. Fatal to the run."""


class HeaderReadError(SourceError):
    """The header row could not be read or skipped."""


class SourceReadError(SourceError):
    """I/O failure while reading data rows (not a normal end of input)."""


class InvalidSourcePathError(SourceError):
    """The source path does not exist, is not a file, or is not a .csv."""


class ScoreOverflowError(ActivityError, OverflowError):
    """A repository total does not fit the vectorized strategy's Int64 column."""

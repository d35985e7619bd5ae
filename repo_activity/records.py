import re
import msgspec
from collections.abc import Sequence
from repo_activity.common.config import (
    REQUIRED_FIELDS,
    REPOSITORY_FIELD,
    FILES_FIELD,
    ADDITIONS_FIELD,
    DELETIONS_FIELD,
    NUMERIC_FIELDS,
)
from repo_activity.errors import ShapeError, RecordValueError

# One tokenized input line: timestamp, user, repository, files, additions, deletions
RawRecord = Sequence[str]

# Base-10 integer with an optional sign, no whitespace or underscores
_INTEGER = re.compile(r"[+-]?[0-9]+")

_CHECKED_FIELDS = (REPOSITORY_FIELD, FILES_FIELD, ADDITIONS_FIELD, DELETIONS_FIELD)


# --- 1. STRUCTS ---


class ValidatedEvent(msgspec.Struct, frozen=True):
    repository: str
    files: int
    additions: int
    deletions: int


class RankedRepo(msgspec.Struct, frozen=True):
    repository: str
    score: int


# --- 2. VALIDATION ---


def check_shape(raw: RawRecord) -> None:
    """Raises ShapeError unless the record has every field the scorer reads."""
    if len(raw) < REQUIRED_FIELDS:
        raise ShapeError(
            f"expected at least {REQUIRED_FIELDS} fields, got {len(raw)}"
        )
    for position in _CHECKED_FIELDS:
        if raw[position] == "":
            raise ShapeError(f"required field {position} is empty")


def parse_count(field: str, value: str) -> int:
    """Parses a non-negative base-10 integer or raises RecordValueError."""
    if _INTEGER.fullmatch(value) is None:
        raise RecordValueError(field, value, "not a base-10 integer")
    number = int(value)
    if number < 0:
        raise RecordValueError(field, value, "negative")
    return number


def validate(raw: RawRecord) -> ValidatedEvent:
    """
    Builds a ValidatedEvent from a raw record, all-or-nothing.
    Shape is checked before any numeric parsing.
    """
    check_shape(raw)
    counts = {field: parse_count(field, raw[pos]) for field, pos in NUMERIC_FIELDS.items()}
    return ValidatedEvent(repository=raw[REPOSITORY_FIELD], **counts)


# --- 3. SCORING ---


def activity_score(files: int, additions: int, deletions: int) -> int:
    """Breadth weighted by volume, plus deletions as linear churn.

    Python ints widen on overflow, so the score is exact at any size.
    """
    return files * additions + deletions


event_score = lambda event: activity_score(event.files, event.additions, event.deletions)

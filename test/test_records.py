import pytest
from repo_activity.errors import RecordValueError, ShapeError
from repo_activity.records import (
    ValidatedEvent,
    activity_score,
    check_shape,
    event_score,
    parse_count,
    validate,
)

# --- 1. Configuration & Scenarios ---

VALID_RECORDS = {
    "basic": (
        ["2023-01-01", "user1", "repo1", "1", "10", "5"],
        ValidatedEvent("repo1", 1, 10, 5),
    ),
    "extra_fields_ignored": (
        ["2023-01-01", "user1", "repo1", "2", "20", "10", "extra", ""],
        ValidatedEvent("repo1", 2, 20, 10),
    ),
    "empty_timestamp_and_user": (
        ["", "", "repo1", "0", "0", "0"],
        ValidatedEvent("repo1", 0, 0, 0),
    ),
    "signed_zero": (
        ["t", "u", "repo1", "+0", "-0", "+7"],
        ValidatedEvent("repo1", 0, 0, 7),
    ),
    "opaque_repository": (
        ["t", "u", " Repo\x07/ünï ", "1", "1", "1"],
        ValidatedEvent(" Repo\x07/ünï ", 1, 1, 1),
    ),
    "huge_counts": (
        ["t", "u", "repo1", "99999999999999999999", "1", "0"],
        ValidatedEvent("repo1", 99999999999999999999, 1, 0),
    ),
}

REJECTED_RECORDS = {
    "empty_record": ([], ShapeError),
    "too_few_fields": (["2023-01-01", "user1", "repo1", "1", "10"], ShapeError),
    "empty_repository": (["2023-01-01", "user1", "", "1", "10", "5"], ShapeError),
    "empty_files": (["2023-01-01", "user1", "repo1", "", "10", "5"], ShapeError),
    "empty_additions": (["2023-01-01", "user1", "repo1", "1", "", "5"], ShapeError),
    "empty_deletions": (["2023-01-01", "user1", "repo1", "1", "10", ""], ShapeError),
    # Shape is checked before any numeric parsing
    "empty_wins_over_non_numeric": (["t", "u", "repo1", "abc", "10", ""], ShapeError),
    "negative_files": (["t", "u", "repo1", "-1", "10", "5"], RecordValueError),
    "negative_deletions": (["t", "u", "repo1", "1", "10", "-5"], RecordValueError),
    "non_numeric": (["t", "u", "repo1", "one", "10", "5"], RecordValueError),
    "decimal": (["t", "u", "repo1", "1.5", "10", "5"], RecordValueError),
    "surrounding_whitespace": (["t", "u", "repo1", " 1", "10", "5"], RecordValueError),
    "underscore_separator": (["t", "u", "repo1", "1_000", "10", "5"], RecordValueError),
    "non_ascii_digits": (["t", "u", "repo1", "٣", "10", "5"], RecordValueError),
    "only_sign": (["t", "u", "repo1", "1", "+", "5"], RecordValueError),
}

SCORE_CASES = [
    (1, 10, 5, 1 * 10 + 5),
    (2, 20, 10, 2 * 20 + 10),
    (3, 30, 15, 3 * 30 + 15),
    (0, 1000, 0, 0),
    (0, 0, 7, 7),
    (2**62, 4, 1, 2**64 + 1),
]


# --- 2. Driver Test Functions ---


@pytest.mark.parametrize("scenario_name", VALID_RECORDS.keys())
def test_validate_accepts(scenario_name):
    raw, expected = VALID_RECORDS[scenario_name]
    check_shape(raw)
    assert validate(raw) == expected


@pytest.mark.parametrize("scenario_name", REJECTED_RECORDS.keys())
def test_validate_rejects(scenario_name):
    raw, error = REJECTED_RECORDS[scenario_name]
    with pytest.raises(error):
        validate(raw)


def test_shape_error_is_raised_by_check_shape_alone():
    with pytest.raises(ShapeError, match="expected at least 6 fields, got 3"):
        check_shape(["a", "b", "c"])


def test_value_error_names_the_field():
    with pytest.raises(RecordValueError) as excinfo:
        validate(["t", "u", "repo1", "1", "ten", "5"])
    assert excinfo.value.field == "additions"
    assert excinfo.value.value == "ten"
    assert isinstance(excinfo.value, ValueError)


def test_parse_count_negative_message():
    with pytest.raises(RecordValueError, match="negative"):
        parse_count("deletions", "-3")


@pytest.mark.parametrize("files, additions, deletions, expected", SCORE_CASES)
def test_activity_score(files, additions, deletions, expected):
    assert activity_score(files, additions, deletions) == expected


def test_activity_score_is_pure():
    results = {activity_score(7, 11, 13) for _ in range(100)}
    assert results == {90}


def test_event_score_uses_event_fields():
    assert event_score(ValidatedEvent("repo2", 3, 30, 15)) == 105

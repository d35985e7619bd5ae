import pytest
from repo_activity.records import RankedRepo
from repo_activity.ranking import format_report, get_top_k, rank

# --- 1. Configuration & Scenarios ---

TEST_SCENARIOS = {
    "basic_flow": {
        "aggregate": {"repo1": 55, "repo2": 105},
        "ranked": [RankedRepo("repo2", 105), RankedRepo("repo1", 55)],
        "report": "1. repo2 - Score: 105\n2. repo1 - Score: 55",
    },
    "tie_breaking": {
        "aggregate": {"zeta": 10, "alpha": 10, "mid": 10, "top": 11, "low": 0},
        "ranked": [
            RankedRepo("top", 11),
            RankedRepo("alpha", 10),
            RankedRepo("mid", 10),
            RankedRepo("zeta", 10),
            RankedRepo("low", 0),
        ],
        "report": (
            "1. top - Score: 11\n"
            "2. alpha - Score: 10\n"
            "3. mid - Score: 10\n"
            "4. zeta - Score: 10\n"
            "5. low - Score: 0"
        ),
    },
    "case_sensitive_names": {
        "aggregate": {"b": 1, "B": 1, "a": 1},
        "ranked": [RankedRepo("B", 1), RankedRepo("a", 1), RankedRepo("b", 1)],
        "report": "1. B - Score: 1\n2. a - Score: 1\n3. b - Score: 1",
    },
    "huge_scores": {
        "aggregate": {"big": 2**70, "bigger": 2**70 + 1},
        "ranked": [RankedRepo("bigger", 2**70 + 1), RankedRepo("big", 2**70)],
        "report": f"1. bigger - Score: {2**70 + 1}\n2. big - Score: {2**70}",
    },
    "empty": {
        "aggregate": {},
        "ranked": [],
        "report": "",
    },
}


# --- 2. Driver Test Functions ---


@pytest.mark.parametrize("scenario_name", TEST_SCENARIOS.keys())
def test_rank(scenario_name):
    config = TEST_SCENARIOS[scenario_name]
    assert rank(config["aggregate"]) == config["ranked"]


@pytest.mark.parametrize("scenario_name", TEST_SCENARIOS.keys())
def test_format_report(scenario_name):
    config = TEST_SCENARIOS[scenario_name]
    assert format_report(config["ranked"]) == config["report"]


def test_rank_is_independent_of_insertion_order():
    items = [(f"repo{i}", i % 4) for i in range(50)]
    forward = rank(dict(items))
    backward = rank(dict(reversed(items)))
    assert forward == backward
    scores = [repo.score for repo in forward]
    assert scores == sorted(scores, reverse=True)


def test_report_truncates_to_top_k():
    ranked = rank({f"repo{i:02d}": i for i in range(25)})
    lines = format_report(ranked, top_k=10).splitlines()
    assert len(lines) == 10
    assert lines[0] == "1. repo24 - Score: 24"
    assert lines[-1] == "10. repo15 - Score: 15"


def test_report_default_top_k_is_ten():
    ranked = rank({f"repo{i:02d}": i for i in range(25)})
    assert len(format_report(ranked).splitlines()) == 10


def test_report_with_fewer_entries_than_top_k():
    ranked = rank({"only": 3})
    assert format_report(ranked, top_k=10) == "1. only - Score: 3"


def test_get_top_k_returns_a_new_list():
    ranked = rank({"a": 2, "b": 1})
    top = get_top_k(ranked, 1)
    top.append(RankedRepo("c", 0))
    assert len(ranked) == 2

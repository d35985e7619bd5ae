from collections.abc import Mapping, Sequence
from repo_activity.common.config import TOP_K
from repo_activity.records import RankedRepo


def rank(aggregate: Mapping[str, int]) -> list[RankedRepo]:
    """Score descending, then repository name ascending for equal scores."""
    return [
        RankedRepo(repository=repository, score=score)
        for repository, score in sorted(aggregate.items(), key=lambda x: (-x[1], x[0]))
    ]


get_top_k = lambda ranked, k: list(ranked[:k])


def format_report(ranked: Sequence[RankedRepo], top_k: int = TOP_K) -> str:
    return "\n".join(
        f"{position}. {repo.repository} - Score: {repo.score}"
        for position, repo in enumerate(get_top_k(ranked, top_k), start=1)
    )

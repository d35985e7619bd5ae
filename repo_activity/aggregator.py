import threading
from repo_activity.common.config import AGGREGATOR_SHARDS


class Aggregator:
    """
    Thread-safe repository -> cumulative score accumulator.

    Keys are spread over independent dict+lock shards so merges on unrelated
    repositories rarely contend. ``shards=1`` is a single global lock.
    Each merge holds its shard's lock for the whole read-add-write, so N
    concurrent merges on one key always sum to the total of their deltas.
    """

    def __init__(self, shards: int = AGGREGATOR_SHARDS):
        if shards < 1:
            raise ValueError(f"shards must be >= 1, got {shards}")
        self._scores = [{} for _ in range(shards)]
        self._locks = [threading.Lock() for _ in range(shards)]

    def _shard(self, repository: str) -> int:
        return hash(repository) % len(self._scores)

    def merge(self, repository: str, delta: int) -> None:
        index = self._shard(repository)
        with self._locks[index]:
            scores = self._scores[index]
            scores[repository] = scores.get(repository, 0) + delta

    def snapshot(self) -> dict[str, int]:
        """
        Returns a copy of every repository's score.
        Only meaningful once all writers have finished.
        """
        result = {}
        for lock, scores in zip(self._locks, self._scores):
            with lock:
                result.update(scores)
        return result

    def __len__(self) -> int:
        return sum(len(scores) for scores in self._scores)

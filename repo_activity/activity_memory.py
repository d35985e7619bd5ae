import time
import msgspec
from repo_activity.aggregator import Aggregator
from repo_activity.common.config import WORKER_COUNT, QUEUE_CAPACITY
from repo_activity.common.logger import canonical_logger, log_rejection
from repo_activity.common.utils import read_records as extractor
from repo_activity.pipeline import ingest
from repo_activity.ranking import rank
from repo_activity.records import RankedRepo


@canonical_logger(event_name="activity_memory_execution")
def activity_memory(
    file_path: str,
    sink=None,
    workers: int = WORKER_COUNT,
    capacity: int = QUEUE_CAPACITY,
    ctx=None,
) -> list[RankedRepo]:
    """
    Ranks repositories by activity score with the streaming worker pipeline.
    Memory stays bounded by the queue capacity plus one entry per repository.
    """
    if ctx:
        ctx.add_context(file_path=file_path, workers=workers, capacity=capacity)

    # 1. Stream, validate, score and merge
    t0 = time.perf_counter()
    aggregator = Aggregator()
    stats = ingest(
        extractor(file_path),
        aggregator,
        workers=workers,
        capacity=capacity,
        sink=sink or log_rejection,
    )
    if ctx:
        ctx.add_step("ingest", round((time.perf_counter() - t0) * 1000, 4))
        for name, value in msgspec.structs.asdict(stats).items():
            ctx.add_metric(name, value)

    # 2. Snapshot after the completion barrier and rank
    t0 = time.perf_counter()
    result = rank(aggregator.snapshot())
    if ctx:
        ctx.add_step("rank", round((time.perf_counter() - t0) * 1000, 4))
        ctx.add_metric("repositories", len(result))

    return result

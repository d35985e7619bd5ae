"""
Concurrent ingestion: one producer, a bounded queue, a fixed worker pool.

The producer runs on the caller's thread. It skips the header, shape-checks
every row and blocks on ``put`` while the queue is full. Workers validate,
score and merge into the shared Aggregator. One sentinel per worker closes the
queue, and the driver waits on every worker future before returning, so a
snapshot taken afterwards sees every merge.
"""

import queue
import threading
import msgspec
from collections import Counter
from collections.abc import Callable, Iterable, Iterator
from concurrent.futures import ThreadPoolExecutor
from repo_activity.aggregator import Aggregator
from repo_activity.common.config import WORKER_COUNT, QUEUE_CAPACITY
from repo_activity.common.logger import log_rejection
from repo_activity.common.utils import READ_ERRORS
from repo_activity.errors import (
    HeaderReadError,
    RecordError,
    RecordValueError,
    ShapeError,
    SourceReadError,
)
from repo_activity.records import RawRecord, check_shape, event_score, validate

# (error_type, message, **details) -> None
DiagnosticSink = Callable[..., None]

# Marks the queue as closed; each worker consumes exactly one
_CLOSED = object()


class IngestionStats(msgspec.Struct):
    workers: int
    records_read: int = 0
    records_enqueued: int = 0
    records_merged: int = 0
    shape_rejected: int = 0
    value_rejected: int = 0


def _reject(sink: DiagnosticSink, exc: RecordError, row: int, raw: RawRecord):
    sink(exc.error_type, str(exc), row=row, record=list(raw))


def _process(item, aggregator: Aggregator, sink: DiagnosticSink, local_counts: Counter):
    row, raw = item
    try:
        event = validate(raw)
    except RecordError as exc:
        local_counts[exc.error_type] += 1
        _reject(sink, exc, row, raw)
        return
    aggregator.merge(event.repository, event_score(event))
    local_counts["merged"] += 1


def _worker(
    records_queue: queue.Queue,
    aggregator: Aggregator,
    sink: DiagnosticSink,
    cancelled: threading.Event,
) -> Counter:
    """
    Idle -> Processing -> Idle until the sentinel arrives (Stopped).
    After cancellation items are drained without merging. An unexpected
    failure cancels the run but the worker keeps draining so the producer
    never blocks on a full queue; the failure is re-raised once stopped.
    """
    local_counts = Counter()
    failure = None
    while True:
        item = records_queue.get()
        if item is _CLOSED:
            break
        if cancelled.is_set():
            continue
        try:
            _process(item, aggregator, sink, local_counts)
        except Exception as exc:
            failure = exc
            cancelled.set()

    if failure is not None:
        raise failure
    return local_counts


def _produce(
    rows: Iterator[RawRecord],
    records_queue: queue.Queue,
    sink: DiagnosticSink,
    cancelled: threading.Event,
    stats: IngestionStats,
) -> None:
    row = 1  # header
    while not cancelled.is_set():
        try:
            raw = next(rows)
        except StopIteration:
            return
        except READ_ERRORS as exc:
            raise SourceReadError(f"error reading row {row + 1}: {exc}") from exc
        row += 1
        stats.records_read += 1

        try:
            check_shape(raw)
        except ShapeError as exc:
            stats.shape_rejected += 1
            _reject(sink, exc, row, raw)
            continue

        # Blocks while the queue is full
        records_queue.put((row, raw))
        stats.records_enqueued += 1


def ingest(
    records: Iterable[RawRecord],
    aggregator: Aggregator,
    *,
    workers: int = WORKER_COUNT,
    capacity: int = QUEUE_CAPACITY,
    sink: DiagnosticSink = log_rejection,
) -> IngestionStats:
    """
    Streams tokenized rows (header first) into ``aggregator``.

    Malformed rows are reported to ``sink`` and skipped. A failure reading the
    header raises HeaderReadError before any worker starts; a failure reading
    a later row raises SourceReadError after the workers have drained.
    """
    if workers < 1:
        raise ValueError(f"workers must be >= 1, got {workers}")
    if capacity < 1:
        raise ValueError(f"capacity must be >= 1, got {capacity}")

    rows = iter(records)
    try:
        next(rows)
    except StopIteration:
        raise HeaderReadError("missing header row: input is empty") from None
    except READ_ERRORS as exc:
        raise HeaderReadError(f"error reading header: {exc}") from exc

    stats = IngestionStats(workers=workers)
    records_queue = queue.Queue(maxsize=capacity)
    cancelled = threading.Event()

    with ThreadPoolExecutor(max_workers=workers, thread_name_prefix="ingest") as executor:
        futures = [
            executor.submit(_worker, records_queue, aggregator, sink, cancelled)
            for _ in range(workers)
        ]
        try:
            _produce(rows, records_queue, sink, cancelled, stats)
        except BaseException:
            cancelled.set()
            raise
        finally:
            for _ in futures:
                records_queue.put(_CLOSED)

        # Completion barrier: every worker has stopped after this loop
        total_counts = Counter()
        for future in futures:
            total_counts.update(future.result())

    stats.records_merged = total_counts["merged"]
    stats.value_rejected = total_counts[RecordValueError.error_type]
    stats.shape_rejected += total_counts[ShapeError.error_type]
    return stats

import time
import polars as pl
from repo_activity.common.config import REPOSITORY_FIELD, NUMERIC_FIELDS
from repo_activity.common.logger import canonical_logger
from repo_activity.common.utils import (
    FIELD_COLUMNS,
    READ_ERRORS,
    read_records,
    records_frame as extractor,
)
from repo_activity.errors import HeaderReadError, ScoreOverflowError, SourceReadError
from repo_activity.records import RankedRepo

# Smallest float that no longer fits an Int64 column
INT64_LIMIT = 2.0**63
INTEGER_PATTERN = r"^[+-]?[0-9]+$"
COUNTS = list(NUMERIC_FIELDS)


def load_events(file_path: str) -> pl.LazyFrame:
    """
    Tokenizes the log with the same strict reader as the streaming pipeline,
    so header failures and quoting rules match it exactly.
    """
    rows = read_records(file_path)
    try:
        try:
            next(rows)
        except StopIteration:
            raise HeaderReadError("missing header row: input is empty") from None
        except READ_ERRORS as exc:
            raise HeaderReadError(f"error reading header: {exc}") from exc

        try:
            return extractor(rows)
        except READ_ERRORS as exc:
            raise SourceReadError(f"error reading CSV: {exc}") from exc
    finally:
        rows.close()


# Modular Functional Blocks returning LazyFrames (Optimized for Time)
complete_records = lambda lf: lf.filter(
    pl.all_horizontal([pl.col(c).is_not_null() & (pl.col(c) != "") for c in FIELD_COLUMNS])
).select(
    pl.col(FIELD_COLUMNS[REPOSITORY_FIELD]).alias("repository"),
    *[pl.col(FIELD_COLUMNS[pos]).alias(field) for field, pos in NUMERIC_FIELDS.items()],
)

valid_events = lambda lf: (
    lf.filter(pl.all_horizontal([pl.col(c).str.contains(INTEGER_PATTERN) for c in COUNTS]))
    .with_columns([pl.col(c).str.strip_prefix("+").alias(c) for c in COUNTS])
    .with_columns(
        *[pl.col(c).cast(pl.Int64, strict=False).alias(c) for c in COUNTS],
        *[pl.col(c).cast(pl.Float64, strict=False).alias(f"{c}_f") for c in COUNTS],
    )
    # Out-of-range counts are null in Int64 and reported by the overflow flag
    .filter(pl.all_horizontal([pl.col(f"{c}_f") >= 0 for c in COUNTS]))
)

event_scores = lambda lf: lf.with_columns(
    (pl.col("files") * pl.col("additions") + pl.col("deletions")).alias("score"),
    (pl.col("files_f") * pl.col("additions_f") + pl.col("deletions_f")).alias("score_f"),
    pl.any_horizontal([pl.col(f"{c}_f") >= INT64_LIMIT for c in COUNTS]).alias("overflow"),
)

repo_scores = lambda lf: lf.group_by("repository").agg(
    pl.col("score").sum(),
    pl.col("score_f").sum(),
    pl.col("overflow").any(),
)


@canonical_logger(event_name="activity_time_execution")
def activity_time(file_path: str, ctx=None) -> list[RankedRepo]:
    """
    Ranks repositories with a single Polars lazy query.
    Same rules as the streaming pipeline, but totals live in Int64: a total
    that would not fit raises ScoreOverflowError instead of wrapping.
    """
    if ctx:
        ctx.add_context(file_path=file_path)

    # 1. Load
    t0 = time.perf_counter()
    events = load_events(file_path)
    if ctx:
        ctx.add_step("load_records", round((time.perf_counter() - t0) * 1000, 4))

    # 2. SINGLE EXECUTION
    t0 = time.perf_counter()
    result = (
        events.pipe(complete_records)
        .pipe(valid_events)
        .pipe(event_scores)
        .pipe(repo_scores)
        .sort(["score", "repository"], descending=[True, False])
        .collect()
    )
    if ctx:
        ctx.add_step("execution_collect", round((time.perf_counter() - t0) * 1000, 4))
        ctx.add_metric("repositories", result.height)

    if result["overflow"].any() or (result["score_f"] >= INT64_LIMIT).any():
        raise ScoreOverflowError("a repository score exceeds the Int64 range")

    return [
        RankedRepo(repository=repository, score=score)
        for repository, score in result.select("repository", "score").iter_rows()
    ]

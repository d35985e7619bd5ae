import argparse
import sys
from collections.abc import Sequence
from repo_activity.activity_memory import activity_memory
from repo_activity.common.config import TOP_K, WORKER_COUNT
from repo_activity.common.utils import validate_csv_path
from repo_activity.errors import SourceError
from repo_activity.ranking import format_report


def _positive_int(value: str) -> int:
    number = int(value)
    if number < 1:
        raise argparse.ArgumentTypeError(f"must be >= 1, got {number}")
    return number


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="repo-activity",
        description="Rank repositories by activity score from a CSV activity log.",
    )
    parser.add_argument(
        "path",
        help="CSV file with columns timestamp,user,repository,files,additions,deletions.",
    )
    parser.add_argument(
        "-w",
        "--workers",
        type=_positive_int,
        default=WORKER_COUNT,
        help=f"Number of parallel workers (default: {WORKER_COUNT}).",
    )
    return parser


def main(argv: Sequence[str] | None = None) -> int:
    args = _build_parser().parse_args(argv)
    try:
        path = validate_csv_path(args.path)
        ranked = activity_memory(path, workers=args.workers)
    except SourceError as exc:
        print(f"error: {exc}", file=sys.stderr)
        return 1

    report = format_report(ranked, TOP_K)
    if report:
        print(report)
    return 0

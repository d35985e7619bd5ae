import csv
import os
import sys
import polars as pl
from collections.abc import Iterable, Iterator
from itertools import islice
from pathlib import Path
from google.api_core.exceptions import GoogleAPIError
from repo_activity.common.config import REQUIRED_FIELDS, POLARS_BATCH_ROWS
from repo_activity.errors import InvalidSourcePathError

# Repository identifiers are opaque and may be arbitrarily long
csv.field_size_limit(sys.maxsize)

# Failures of the tokenizer or the underlying storage
READ_ERRORS = (OSError, csv.Error, UnicodeDecodeError, GoogleAPIError)

FIELD_COLUMNS = [f"field_{i}" for i in range(REQUIRED_FIELDS)]
POLARS_SCHEMA = {name: pl.String for name in FIELD_COLUMNS}


# --- 1. SOURCE PATHS ---


def validate_csv_path(file_path: str) -> str:
    """
    Normalizes a local path and checks it points to an existing .csv file.
    gs:// URIs are returned untouched; their existence is checked on read.
    """
    if file_path.startswith("gs://"):
        return file_path

    clean_path = Path(os.path.normpath(file_path))
    if not clean_path.exists():
        raise InvalidSourcePathError(f"file does not exist: {clean_path}")
    if not clean_path.is_file():
        raise InvalidSourcePathError(f"not a regular file: {clean_path}")
    if clean_path.suffix != ".csv":
        raise InvalidSourcePathError(f"file must have .csv extension: {clean_path}")
    return str(clean_path)


def _get_gcs_blob(file_path: str):
    """Auxiliar para obtener el blob de GCS."""
    from google.cloud import storage

    path_parts = file_path.replace("gs://", "").split("/")
    bucket_name = path_parts[0]
    blob_name = "/".join(path_parts[1:])
    client = storage.Client()
    bucket = client.bucket(bucket_name)
    return bucket.blob(blob_name)


# --- 2. STREAMING TOKENIZER (shared by both strategies) ---


def read_records(file_path: str) -> Iterator[list[str]]:
    """
    Yields one tokenized row per non-blank CSV line, header included.
    Opening happens on the first next() so open errors surface as read errors.
    Quoting errors raise csv.Error (strict dialect).
    """
    if file_path.startswith("gs://"):
        file_obj = _get_gcs_blob(file_path).open("rt", encoding="utf-8", newline="")
    else:
        file_obj = open(file_path, "r", encoding="utf-8", newline="")

    try:
        for row in csv.reader(file_obj, strict=True):
            if row:
                yield row
    finally:
        file_obj.close()


# --- 3. POLARS FRAME (time strategy) ---


def records_frame(rows: Iterable[list[str]], batch_size: int = POLARS_BATCH_ROWS) -> pl.LazyFrame:
    """
    Construye un LazyFrame a partir del tokenizador, por lotes.
    Solo se conservan los primeros campos por posicion (field_0..field_5, String);
    las filas cortas se completan con nulls.
    """
    padding = [None] * REQUIRED_FIELDS
    rows = iter(rows)
    frames = []
    while batch := list(islice(rows, batch_size)):
        frames.append(
            pl.DataFrame(
                [(row + padding)[:REQUIRED_FIELDS] for row in batch],
                schema=POLARS_SCHEMA,
                orient="row",
            )
        )

    if not frames:
        return pl.LazyFrame(schema=POLARS_SCHEMA)
    return pl.concat(frames, how="vertical").lazy()

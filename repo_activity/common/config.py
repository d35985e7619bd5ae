"""Fixed run constants. Nothing here is read from the environment."""

# Number of ranked repositories printed by the reporter
TOP_K = 10

# Pipeline sizing
WORKER_COUNT = 4
QUEUE_CAPACITY = 100
AGGREGATOR_SHARDS = 16

# Record layout: timestamp, user, repository, files, additions, deletions
REQUIRED_FIELDS = 6
REPOSITORY_FIELD = 2
FILES_FIELD = 3
ADDITIONS_FIELD = 4
DELETIONS_FIELD = 5

NUMERIC_FIELDS = {
    "files": FILES_FIELD,
    "additions": ADDITIONS_FIELD,
    "deletions": DELETIONS_FIELD,
}

# Rows per DataFrame chunk when the time strategy loads the tokenized log
POLARS_BATCH_ROWS = 100_000

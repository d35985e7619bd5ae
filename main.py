import functions_framework
import json
import msgspec
from repo_activity.activity_memory import activity_memory
from repo_activity.activity_time import activity_time
from repo_activity.common.config import TOP_K
from repo_activity.common.logger import logger
from repo_activity.common.utils import validate_csv_path
from repo_activity.errors import ActivityError
from repo_activity.ranking import get_top_k

STRATEGIES = {
    "memory": activity_memory,
    "time": activity_time,
}


def _serializable_result(ranked):
    """Top-K entries as JSON-ready dicts with their 1-indexed rank."""
    return [
        {"rank": position, **msgspec.to_builtins(repo)}
        for position, repo in enumerate(get_top_k(ranked, TOP_K), start=1)
    ]


def _error(message, status):
    return json.dumps({"status": "error", "message": message}), status


@functions_framework.http
def entrypoint(request):
    """Entrypoint HTTP para Cloud Function: ranking on-demand de un CSV."""
    strategy = request.args.get("strategy", "memory")
    file_path = request.args.get("file")

    if not file_path:
        return _error("Missing required parameter: file", 400)

    func = STRATEGIES.get(strategy)
    if not func:
        return _error(f"Invalid strategy: {strategy}", 400)

    try:
        ranked = func(validate_csv_path(file_path))
    except ActivityError as e:
        logger.warning("http_request_failed", file=file_path, reason=str(e))
        return _error(str(e), 422)
    except Exception as e:
        logger.error("http_request_crashed", file=file_path, reason=str(e))
        return _error(str(e), 500)

    return json.dumps(
        {
            "strategy": strategy,
            "file": file_path,
            "result": _serializable_result(ranked),
        }
    ), 200

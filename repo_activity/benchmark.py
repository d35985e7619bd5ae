import sys
import time
import functools
from typing import Callable, Any
from memory_profiler import memory_usage
from repo_activity.activity_memory import activity_memory
from repo_activity.activity_time import activity_time

output_file = "benchmark_results.txt"
WORKER_COUNTS = (1, 4, 8)


def measure_time(func: Callable, *args, **kwargs) -> tuple[float, Any]:
    """Mide el tiempo de ejecución y retorna el resultado."""
    start_time = time.perf_counter()
    result = func(*args, **kwargs)
    end_time = time.perf_counter()
    return end_time - start_time, result


def measure_memory(func: Callable, *args, **kwargs) -> tuple[float, Any]:
    """Mide el pico de memoria y retorna el resultado."""
    mem_samples, result = memory_usage((func, args, kwargs), interval=0.1, retval=True)
    return max(mem_samples), result


def profile_performance(func):
    """
    Runs the function once, measuring time inside the memory sampler so both
    numbers come from the same execution.
    """

    @functools.wraps(func)
    def wrapper(*args, **kwargs):
        def time_wrapped_func():
            return measure_time(func, *args, **kwargs)

        peak_mem, (duration, result) = measure_memory(time_wrapped_func)
        return peak_mem, duration, result

    return wrapper


def benchmark_cases(file_path: str) -> list[tuple[str, Callable]]:
    cases = [("TIME (POLARS LAZY)", lambda: activity_time(file_path))]
    for workers in WORKER_COUNTS:
        cases.append(
            (
                f"MEMORY (STREAMING, {workers} WORKERS)",
                functools.partial(activity_memory, file_path, workers=workers),
            )
        )
    return cases


def run_benchmark(file_path: str, output_path: str = output_file) -> list[str]:
    lines = ["=" * 80, f"=== BENCHMARK: {file_path} ===", "=" * 80]
    reference = None
    for name, case in benchmark_cases(file_path):
        peak_mem, duration, result = profile_performance(case)()
        # Every strategy must agree on the ranking
        if reference is None:
            reference = result
        agrees = result == reference
        lines.append(f"--- {name} ---")
        lines.append(f"  > Time: {duration:.4f} s")
        lines.append(f"  > Memory: {peak_mem:.2f} MB")
        lines.append(f"  > Repositories: {len(result)}")
        lines.append(f"  > Matches reference: {agrees}")

    with open(output_path, "w", encoding="utf-8") as f:
        f.write("\n".join(lines) + "\n")
    return lines


if __name__ == "__main__":
    if len(sys.argv) != 2:
        print("Usage: python -m repo_activity.benchmark <file.csv>")
        sys.exit(2)
    for line in run_benchmark(sys.argv[1]):
        print(line)
    print(f"\nBenchmark completed. Results saved to {output_file}")

"""
In-process metrics for the studio service, served by GET /metrics.

Counters:   requests.generate, requests.edit, generations.{completed,failed,cancelled}, veo.polls
Gauges:     active_generations, start_time
Latency:    one bounded window of millisecond samples per stage
            (prompt_synth, video_job, image_edit), filled through `timed()`
Errors:     the last ERROR_WINDOW failures, grouped by stage and type

Nothing is persisted; a restart starts from zero.
"""

import threading
import time
from collections import Counter, deque
from contextlib import contextmanager
from typing import Deque, Dict, Iterator

LATENCY_WINDOW = 100
ERROR_WINDOW = 50

_lock = threading.Lock()
_counters: Counter = Counter()
_gauges: Dict[str, float] = {}
_latency: Dict[str, Deque[float]] = {}
_errors: Deque[dict] = deque(maxlen=ERROR_WINDOW)


def inc_counter(name: str, amount: int = 1):
    with _lock:
        _counters[name] += amount


def set_gauge(name: str, value: float):
    with _lock:
        _gauges[name] = value


def record_latency(stage: str, duration_ms: float):
    with _lock:
        window = _latency.setdefault(stage, deque(maxlen=LATENCY_WINDOW))
        window.append(duration_ms)


@contextmanager
def timed(stage: str) -> Iterator[None]:
    """Record how long the block took under `stage`, whether or not it raised."""
    started = time.perf_counter()
    try:
        yield
    finally:
        record_latency(stage, (time.perf_counter() - started) * 1000)


def record_error(stage: str, error_type: str, message: str):
    with _lock:
        _errors.append({
            "timestamp": time.time(),
            "stage": stage,
            "error_type": error_type,
            "message": message[:300],
        })


def _summarize(samples: list) -> dict:
    ordered = sorted(samples)
    last = len(ordered) - 1
    return {
        "p50": ordered[round(last * 0.50)],
        "p95": ordered[round(last * 0.95)],
        "max": ordered[-1],
        "avg": sum(ordered) / len(ordered),
        "count": len(ordered),
    }


def get_snapshot() -> dict:
    now = time.time()
    with _lock:
        latency = {stage: _summarize(list(w)) for stage, w in _latency.items() if w}
        errors = list(_errors)
        counters = dict(_counters)
        gauges = dict(_gauges)

    patterns = Counter(f"{e['stage']}:{e['error_type']}" for e in errors)
    return {
        "timestamp": now,
        "counters": counters,
        "gauges": gauges,
        "latency": latency,
        "recent_errors": errors[-10:],
        "error_patterns": dict(patterns),
        "uptime_seconds": now - gauges.get("start_time", now),
    }


def reset():
    with _lock:
        _counters.clear()
        _gauges.clear()
        _latency.clear()
        _errors.clear()

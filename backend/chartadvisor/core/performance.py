"""
In-process timing metrics for the API layer.

Route handlers are wrapped with ``track_performance`` and the middleware
records ``request_duration``; the encoding engine itself is not instrumented.
Samples live in memory, capped per metric, and are exposed by GET /api/metrics.
"""
import time
import inspect
import logging
import threading
from collections import defaultdict, deque
from contextlib import contextmanager
from functools import wraps
from typing import Any, Deque, Dict, Iterator, List, Optional

logger = logging.getLogger(__name__)

MAX_SAMPLES_PER_METRIC = 1000

_lock = threading.Lock()
_samples: Dict[str, Deque[Dict[str, Any]]] = defaultdict(lambda: deque(maxlen=MAX_SAMPLES_PER_METRIC))


def _percentile(ordered: List[float], fraction: float) -> float:
    return ordered[min(int(len(ordered) * fraction), len(ordered) - 1)]


def _summarize(values: List[float]) -> Dict[str, float]:
    ordered = sorted(values)
    return {
        'count': len(ordered),
        'min': ordered[0],
        'max': ordered[-1],
        'mean': sum(ordered) / len(ordered),
        'p50': _percentile(ordered, 0.5),
        'p95': _percentile(ordered, 0.95),
        'p99': _percentile(ordered, 0.99),
    }


class PerformanceMonitor:
    """Process-wide store of timing samples, safe to use from worker threads."""

    @staticmethod
    def record_metric(name: str, value: float, metadata: Optional[Dict[str, Any]] = None):
        """
        Append one sample to ``name``; the oldest sample is dropped once the cap is hit.

        Args:
            name: Metric name, e.g. ``suggest_charts`` or ``request_duration``
            value: Duration in seconds
            metadata: Free-form context such as the correlation id or status
        """
        sample = {'value': value, 'timestamp': time.time(), 'metadata': metadata or {}}
        with _lock:
            _samples[name].append(sample)

    @staticmethod
    def get_stats(metric_name: str) -> Optional[Dict[str, float]]:
        """Count, min, max, mean and p50/p95/p99 for one metric, or None if it has no samples."""
        with _lock:
            samples = _samples.get(metric_name)
            values = [s['value'] for s in samples] if samples else []
        return _summarize(values) if values else None

    @staticmethod
    def get_all_metrics() -> Dict[str, Dict[str, float]]:
        with _lock:
            snapshot = {name: [s['value'] for s in samples] for name, samples in _samples.items()}
        return {name: _summarize(values) for name, values in snapshot.items() if values}

    @staticmethod
    def clear_metrics():
        with _lock:
            _samples.clear()


def _correlation_id_from(args, kwargs) -> Optional[str]:
    request = kwargs.get('request', args[0] if args else None)
    state = getattr(request, 'state', None)
    return getattr(state, 'correlation_id', None)


@contextmanager
def _timed(metric_name: str, correlation_id: Optional[str]) -> Iterator[None]:
    started = time.perf_counter()
    try:
        yield
    except Exception as e:
        duration = time.perf_counter() - started
        PerformanceMonitor.record_metric(
            metric_name, duration, {'correlation_id': correlation_id, 'status': 'error', 'error': str(e)}
        )
        logger.error(
            f"{metric_name} raised after {duration:.3f}s: {e}",
            extra={'metric': metric_name, 'duration': duration},
        )
        raise
    duration = time.perf_counter() - started
    PerformanceMonitor.record_metric(metric_name, duration, {'correlation_id': correlation_id, 'status': 'success'})
    logger.debug(f"{metric_name} took {duration:.3f}s", extra={'metric': metric_name, 'duration': duration})


def track_performance(metric_name: str):
    """
    Record how long each call of the wrapped function takes, failures included.

    Works on both plain and ``async`` functions. When the first argument (or
    the ``request`` keyword) is a Starlette request, its correlation id is
    stored with the sample.

        @track_performance("suggest_charts")
        async def suggestions(request: Request, body: SuggestionRequest):
            ...
    """
    def decorator(func):
        if inspect.iscoroutinefunction(func):
            @wraps(func)
            async def async_wrapper(*args, **kwargs):
                with _timed(metric_name, _correlation_id_from(args, kwargs)):
                    return await func(*args, **kwargs)
            return async_wrapper

        @wraps(func)
        def sync_wrapper(*args, **kwargs):
            with _timed(metric_name, _correlation_id_from(args, kwargs)):
                return func(*args, **kwargs)
        return sync_wrapper

    return decorator

"""
Performance monitoring for the Ambit color engine.

Wraps engine stages (extraction, harmony, analysis, optimization) with
duration, memory and CPU sampling and keeps a bounded history per process.
"""

import threading
import time
from collections import defaultdict, deque
from contextlib import contextmanager
from dataclasses import asdict, dataclass
from functools import wraps
from typing import Any, Dict, List, Optional

import numpy as np
import psutil
from loguru import logger

from ambit.config import config


@dataclass
class PerformanceMetrics:
    """Performance sample for one engine operation."""
    operation_name: str
    duration_ms: float
    memory_usage_mb: float
    cpu_percent: float
    pixel_count: int
    color_count: int
    timestamp: float
    error: Optional[str] = None


class PerformanceCollector:
    """Thread-safe bounded history of engine performance samples."""

    def __init__(self, max_history: int = 1000):
        self.max_history = max_history
        self._history: deque = deque(maxlen=max_history)
        self._by_operation: Dict[str, deque] = defaultdict(lambda: deque(maxlen=max_history))
        self._errors: Dict[str, int] = defaultdict(int)
        self._lock = threading.Lock()

    def record_performance(self, metrics: PerformanceMetrics) -> None:
        with self._lock:
            self._history.append(metrics)
            self._by_operation[metrics.operation_name].append(metrics)
            if metrics.error:
                self._errors[metrics.operation_name] += 1

    def get_operation_stats(self, operation_name: str) -> Dict[str, Any]:
        """Summary statistics for one operation, empty when never recorded."""
        with self._lock:
            samples = list(self._by_operation.get(operation_name, ()))
            errors = self._errors.get(operation_name, 0)

        if not samples:
            return {}

        durations = np.array([m.duration_ms for m in samples])
        return {
            "operation": operation_name,
            "count": len(samples),
            "error_count": errors,
            "error_rate": errors / len(samples),
            "duration_ms": {
                "mean": float(np.mean(durations)),
                "p50": float(np.percentile(durations, 50)),
                "p95": float(np.percentile(durations, 95)),
                "max": float(np.max(durations)),
            },
            "memory_mb_peak": float(max(m.memory_usage_mb for m in samples)),
        }

    def get_all_stats(self) -> Dict[str, Any]:
        with self._lock:
            operations = list(self._by_operation.keys())
        return {name: self.get_operation_stats(name) for name in operations}

    def get_recent_metrics(self, limit: int = 10) -> List[Dict[str, Any]]:
        with self._lock:
            recent = list(self._history)[-limit:]
        return [asdict(m) for m in recent]

    def reset(self) -> None:
        with self._lock:
            self._history.clear()
            self._by_operation.clear()
            self._errors.clear()


_collector = PerformanceCollector(max_history=config.METRICS_HISTORY)


def get_performance_collector() -> PerformanceCollector:
    return _collector


@contextmanager
def performance_monitor(operation_name: str, pixel_count: int = 0, color_count: int = 0):
    """Context manager for monitoring performance of engine operations."""
    process = psutil.Process()
    start_time = time.time()
    start_memory = process.memory_info().rss / 1024 / 1024  # MB
    start_cpu = psutil.cpu_percent()

    error_msg = None

    try:
        yield
    except Exception as e:
        error_msg = str(e)
        raise
    finally:
        end_time = time.time()
        end_memory = process.memory_info().rss / 1024 / 1024  # MB
        end_cpu = psutil.cpu_percent()

        metrics = PerformanceMetrics(
            operation_name=operation_name,
            duration_ms=(end_time - start_time) * 1000,
            memory_usage_mb=max(end_memory, start_memory),
            cpu_percent=max(end_cpu, start_cpu),
            pixel_count=pixel_count,
            color_count=color_count,
            timestamp=end_time,
            error=error_msg,
        )
        _collector.record_performance(metrics)

        if error_msg:
            logger.error(f"Operation {operation_name} failed after {metrics.duration_ms:.1f}ms: {error_msg}")
        else:
            logger.debug(f"Operation {operation_name} completed in {metrics.duration_ms:.1f}ms "
                         f"(memory: {metrics.memory_usage_mb:.1f}MB, CPU: {metrics.cpu_percent:.1f}%)")


def performance_tracked(operation_name: str):
    """Decorator form of performance_monitor for functions without pixel input."""
    def decorator(func):
        @wraps(func)
        def wrapper(*args, **kwargs):
            with performance_monitor(operation_name):
                return func(*args, **kwargs)
        return wrapper
    return decorator

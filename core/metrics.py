"""
Observability and Metrics for the document search service

Collects:
- Uploads (accepted, rejected, by file type)
- Deletes
- Searches (result counts by search type, empty searches)
- Latency distributions for uploads and searches
- Alerts for slow searches

Features:
- Thread-safe collection (one collector per application)
- Bounded latency history
- Summary suitable for a /metrics endpoint

Usage:
    from core.metrics import MetricsCollector, PhaseTimer

    metrics = MetricsCollector()

    with PhaseTimer() as timer:
        results = pipeline.search("fruit")
    metrics.record_search([r.search_type.value for r in results], timer.elapsed_ms)

    summary = metrics.get_summary()
"""

import logging
import statistics
import threading
import time
from collections import defaultdict
from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Any, Callable, Dict, List, Optional, Sequence

logger = logging.getLogger(__name__)

MAX_LATENCY_SAMPLES = 10000


# =============================================================================
# Enums
# =============================================================================

class AlertLevel(Enum):
    """Alert severity levels."""
    INFO = "info"
    WARNING = "warning"
    ERROR = "error"


# =============================================================================
# Data Models
# =============================================================================

@dataclass
class Alert:
    """An alert triggered by a metrics threshold."""
    level: AlertLevel
    title: str
    message: str
    metric_name: str
    metric_value: float
    threshold: float
    timestamp: datetime = field(default_factory=datetime.now)

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary."""
        return {
            "level": self.level.value,
            "title": self.title,
            "message": self.message,
            "metric_name": self.metric_name,
            "metric_value": self.metric_value,
            "threshold": self.threshold,
            "timestamp": self.timestamp.isoformat(),
        }


def latency_summary(samples: Sequence[float]) -> Dict[str, float]:
    """Mean and percentiles of a latency sample list (ms)."""
    if not samples:
        return {"count": 0, "mean_ms": 0.0, "p50_ms": 0.0, "p95_ms": 0.0, "max_ms": 0.0}

    ordered = sorted(samples)
    p95_index = min(len(ordered) - 1, int(round(0.95 * (len(ordered) - 1))))
    return {
        "count": len(ordered),
        "mean_ms": round(statistics.mean(ordered), 2),
        "p50_ms": round(statistics.median(ordered), 2),
        "p95_ms": round(ordered[p95_index], 2),
        "max_ms": round(ordered[-1], 2),
    }


# =============================================================================
# Metrics Collector
# =============================================================================

class MetricsCollector:
    """
    Thread-safe metrics collection for uploads, deletes and searches.
    """

    def __init__(
        self,
        slow_search_threshold_ms: float = 1000.0,
        max_alerts: int = 100,
        alert_callback: Optional[Callable[[Alert], None]] = None
    ):
        """
        Initialize metrics collector.

        Args:
            slow_search_threshold_ms: Searches slower than this raise an alert
            max_alerts: Maximum alerts kept in memory
            alert_callback: Optional callback for alerts
        """
        self.slow_search_threshold_ms = slow_search_threshold_ms
        self.max_alerts = max_alerts
        self.alert_callback = alert_callback
        self.started_at = datetime.now()

        self._lock = threading.RLock()
        self._uploads = 0
        self._rejected_uploads = 0
        self._uploads_by_type: Dict[str, int] = defaultdict(int)
        self._rejections_by_reason: Dict[str, int] = defaultdict(int)
        self._deletes = 0
        self._searches = 0
        self._empty_searches = 0
        self._results_by_type: Dict[str, int] = defaultdict(int)
        self._upload_latencies: List[float] = []
        self._search_latencies: List[float] = []
        self._alerts: List[Alert] = []

    def record_upload(
        self,
        success: bool,
        file_type: Optional[str] = None,
        latency_ms: float = 0.0,
        error: Optional[str] = None
    ):
        """
        Record an upload attempt.

        Args:
            success: Whether the document was stored
            file_type: Declared file type
            latency_ms: Time spent indexing
            error: Rejection reason if not stored
        """
        with self._lock:
            if success:
                self._uploads += 1
                self._uploads_by_type[file_type or "unknown"] += 1
            else:
                self._rejected_uploads += 1
                self._rejections_by_reason[error or "unknown"] += 1
            self._append_latency(self._upload_latencies, latency_ms)

    def record_delete(self):
        """Record a document deletion."""
        with self._lock:
            self._deletes += 1

    def record_search(self, result_types: Sequence[str], latency_ms: float):
        """
        Record a search.

        Args:
            result_types: Search type value of each returned result
            latency_ms: Search latency in milliseconds
        """
        with self._lock:
            self._searches += 1
            if not result_types:
                self._empty_searches += 1
            for result_type in result_types:
                self._results_by_type[result_type] += 1
            self._append_latency(self._search_latencies, latency_ms)

            if latency_ms > self.slow_search_threshold_ms:
                self._create_alert(
                    AlertLevel.WARNING,
                    "Slow Search",
                    f"Search took {latency_ms:.0f}ms",
                    "search_latency_ms",
                    latency_ms,
                    self.slow_search_threshold_ms
                )

    def _append_latency(self, samples: List[float], latency_ms: float):
        samples.append(latency_ms)
        # Keep latencies bounded
        if len(samples) > MAX_LATENCY_SAMPLES:
            del samples[:len(samples) - MAX_LATENCY_SAMPLES // 2]

    def _create_alert(
        self,
        level: AlertLevel,
        title: str,
        message: str,
        metric_name: str,
        metric_value: float,
        threshold: float
    ):
        alert = Alert(
            level=level,
            title=title,
            message=message,
            metric_name=metric_name,
            metric_value=metric_value,
            threshold=threshold
        )
        self._alerts.append(alert)
        if len(self._alerts) > self.max_alerts:
            self._alerts = self._alerts[-self.max_alerts:]

        logger.warning(f"[{level.value.upper()}] {title}: {message}")

        if self.alert_callback:
            try:
                self.alert_callback(alert)
            except Exception as e:
                logger.error(f"Alert callback failed: {e}")

    def get_alerts(self) -> List[Dict[str, Any]]:
        """Get recorded alerts, newest last."""
        with self._lock:
            return [a.to_dict() for a in self._alerts]

    def get_summary(self) -> Dict[str, Any]:
        """
        Aggregate counters and latency statistics.

        Returns:
            Dictionary of metrics
        """
        with self._lock:
            return {
                "started_at": self.started_at.isoformat(),
                "uploads": {
                    "accepted": self._uploads,
                    "rejected": self._rejected_uploads,
                    "by_type": dict(self._uploads_by_type),
                    "rejections": dict(self._rejections_by_reason),
                    "latency": latency_summary(self._upload_latencies),
                },
                "deletes": self._deletes,
                "searches": {
                    "total": self._searches,
                    "empty": self._empty_searches,
                    "results_by_type": dict(self._results_by_type),
                    "latency": latency_summary(self._search_latencies),
                },
                "alerts": len(self._alerts),
            }

    def reset(self):
        """Clear all collected metrics."""
        with self._lock:
            self.started_at = datetime.now()
            self._uploads = 0
            self._rejected_uploads = 0
            self._uploads_by_type.clear()
            self._rejections_by_reason.clear()
            self._deletes = 0
            self._searches = 0
            self._empty_searches = 0
            self._results_by_type.clear()
            self._upload_latencies.clear()
            self._search_latencies.clear()
            self._alerts.clear()


# =============================================================================
# Context Managers
# =============================================================================

class PhaseTimer:
    """
    Context manager measuring elapsed wall time.

    Usage:
        with PhaseTimer() as timer:
            pipeline.upload(request)
        print(timer.elapsed_ms)
    """

    def __init__(self):
        self.start_time: Optional[float] = None
        self.elapsed_ms: float = 0.0

    def __enter__(self) -> 'PhaseTimer':
        """Start timing."""
        self.start_time = time.perf_counter()
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        """Record duration."""
        self.elapsed_ms = (time.perf_counter() - self.start_time) * 1000
        return False

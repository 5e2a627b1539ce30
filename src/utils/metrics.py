"""Bounded history of feed fetch attempts.

Every fetch attempt, successful, skipped via 304 or failed, is appended as a
``FetchMetric``. Only the newest ``history_limit`` entries are kept; the
summary is derived from that retained window.
"""

from __future__ import annotations

import math
from collections import deque
from dataclasses import asdict, dataclass
from datetime import datetime, timezone
from typing import Any, Deque, Dict, List, Optional

from config.settings import METRICS_CONFIG
from src.utils.logger import get_logger


@dataclass(frozen=True)
class FetchMetric:
    """Outcome of a single feed fetch attempt."""

    feed_url: str
    source: str
    timestamp: datetime
    duration_ms: int
    articles_added: int
    total_articles_in_feed: int
    skipped_304: bool = False
    error: Optional[str] = None

    @property
    def failed(self) -> bool:
        return bool(self.error)

    def to_dict(self) -> Dict[str, Any]:
        data = asdict(self)
        data["timestamp"] = self.timestamp.isoformat()
        return data


class MetricsLog:
    """In-process ring buffer of fetch metrics."""

    def __init__(
        self,
        history_limit: Optional[int] = None,
        recent_limit: Optional[int] = None,
        module_logger: Any = None,
    ) -> None:
        self.history_limit = int(history_limit or METRICS_CONFIG["history_limit"])
        self.recent_limit = int(recent_limit or METRICS_CONFIG["recent_limit"])
        self._entries: Deque[FetchMetric] = deque(maxlen=self.history_limit)
        self.module_logger = module_logger or get_logger().create_module_logger(
            "metrics.fetch"
        )

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------
    def record(self, metric: FetchMetric) -> None:
        """Append ``metric``, evicting the oldest entry once the cap is reached."""

        self._entries.append(metric)
        try:
            self._log_metric(metric)
        except Exception:  # pragma: no cover
            pass

    def record_fetch(
        self,
        *,
        feed_url: str,
        source: str,
        duration_ms: int,
        articles_added: int = 0,
        total_articles_in_feed: int = 0,
        skipped_304: bool = False,
        error: Optional[str] = None,
    ) -> FetchMetric:
        metric = FetchMetric(
            feed_url=feed_url,
            source=source,
            timestamp=datetime.now(timezone.utc),
            duration_ms=int(duration_ms),
            articles_added=int(articles_added),
            total_articles_in_feed=int(total_articles_in_feed),
            skipped_304=skipped_304,
            error=error,
        )
        self.record(metric)
        return metric

    def history(self) -> List[FetchMetric]:
        return list(self._entries)

    def recent_fetches(self) -> List[FetchMetric]:
        if not self._entries:
            return []
        return list(self._entries)[-self.recent_limit :]

    def summary(self) -> Dict[str, int]:
        entries = list(self._entries)
        total = len(entries)
        total_duration = sum(entry.duration_ms for entry in entries)
        return {
            "total_fetches": total,
            "total_articles_added": sum(entry.articles_added for entry in entries),
            "total_failures": sum(1 for entry in entries if entry.failed),
            "total_304_skips": sum(1 for entry in entries if entry.skipped_304),
            "avg_duration_ms": math.floor(total_duration / total + 0.5) if total else 0,
        }

    def snapshot(self) -> Dict[str, Any]:
        """Return the serializable view handed to API consumers."""

        return {
            "recent_fetches": [metric.to_dict() for metric in self.recent_fetches()],
            "summary": self.summary(),
        }

    def __len__(self) -> int:
        return len(self._entries)

    # ------------------------------------------------------------------
    # Internal helpers
    # ------------------------------------------------------------------
    def _log_metric(self, metric: FetchMetric) -> None:
        if metric.error:
            status = "❌ FAIL"
        elif metric.skipped_304:
            status = "⏭️  304"
        else:
            status = "✅ OK"

        parts = [
            status,
            f"[{metric.source}]",
            f"{metric.duration_ms}ms",
            "not modified"
            if metric.skipped_304
            else f"+{metric.articles_added}/{metric.total_articles_in_feed} articles",
        ]
        if metric.error:
            parts.append(f"error: {metric.error}")

        log = self.module_logger.warning if metric.error else self.module_logger.info
        log(f"📊 Feed Fetch | {' | '.join(parts)}")

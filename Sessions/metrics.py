"""
SESSION METRICS
===============
Prometheus-backed counters for session events.
"""

from __future__ import annotations

import os

from prometheus_client import Counter


_SESSION_EVENTS = None


def _enabled() -> bool:
    return os.getenv("PROMETHEUS_ENABLED", "true").lower() == "true"


def _init_metrics() -> None:
    global _SESSION_EVENTS
    if _SESSION_EVENTS or not _enabled():
        return
    _SESSION_EVENTS = Counter(
        "session_events_total",
        "Count of session lifecycle events",
        ["event"],
    )


def increment_session_event(event: str, amount: int = 1) -> None:
    _init_metrics()
    if not _SESSION_EVENTS:
        return
    _SESSION_EVENTS.labels(event=event).inc(amount)


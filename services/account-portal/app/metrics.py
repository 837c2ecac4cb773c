"""Prometheus instruments shared by the account workflows."""

from __future__ import annotations

from prometheus_client import Counter

AUTH_EVENTS = Counter(
    "account_portal_auth_events_total",
    "Authentication and password-recovery events by outcome.",
    ["event", "outcome"],
)


def record_auth_event(event: str, outcome: str) -> None:
    AUTH_EVENTS.labels(event=event, outcome=outcome).inc()

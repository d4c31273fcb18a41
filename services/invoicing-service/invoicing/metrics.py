"""Prometheus instruments exported on ``/metrics``."""

from __future__ import annotations

from prometheus_client import Counter

AUTH_EVENTS = Counter(
    "invoicing_auth_events_total",
    "Registration, login and token verification outcomes.",
    ["event"],
)

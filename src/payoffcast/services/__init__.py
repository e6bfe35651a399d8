"""Service module exports."""

from . import charts, debts, forecast, goals, health, insights, snapshot

__all__ = [
    "charts",
    "debts",
    "forecast",
    "goals",
    "health",
    "insights",
    "snapshot",
]

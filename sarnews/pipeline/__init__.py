"""Refresh orchestration."""

from .orchestrator import (
    RefreshOrchestrator,
    RefreshOutcome,
    RefreshResult,
    RefreshThrottled,
    RefreshTrigger,
)

__all__ = [
    "RefreshOrchestrator",
    "RefreshOutcome",
    "RefreshResult",
    "RefreshThrottled",
    "RefreshTrigger",
]

"""Public plan exports for gdrivesync."""

from __future__ import annotations

from .actions import Decision
from .classifier import SLACK_MS, changed_since, classify, count_by_kind
from .decision import ClassificationDecision

__all__ = [
    "Decision",
    "ClassificationDecision",
    "SLACK_MS",
    "changed_since",
    "classify",
    "count_by_kind",
]

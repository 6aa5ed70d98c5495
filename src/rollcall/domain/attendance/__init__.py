"""Attendance reconciliation stages and the review workspace."""

from __future__ import annotations

from .pipeline import build_workspace, build_workspace_async
from .workspace import ReviewRow, ReviewWorkspace, ValidationResult

__all__ = [
    "ReviewRow",
    "ReviewWorkspace",
    "ValidationResult",
    "build_workspace",
    "build_workspace_async",
]

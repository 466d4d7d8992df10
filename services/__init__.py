from __future__ import annotations

from .graduate_service import INITIAL_DATA, GraduateService
from .models import GraduateInput, GraduateRecord, MigrationResult, summarize

__all__ = [
    "INITIAL_DATA",
    "GraduateService",
    "GraduateInput",
    "GraduateRecord",
    "MigrationResult",
    "summarize",
]

from __future__ import annotations

from datetime import datetime
from typing import Annotated, Any, Iterable, Literal

from typing_extensions import TypedDict

from pydantic import BaseModel, BeforeValidator, ConfigDict

from persistence.interfaces import StoredDocument

APPROVED = "Approved"
UNDER_REVIEW = "Under Review"

GraduateStatus = Literal["Approved", "Under Review"]


def status_label(status: Any) -> GraduateStatus:
    # Anything that is not literally "Approved" (missing, empty, typos) counts as under review.
    return APPROVED if status == APPROVED else UNDER_REVIEW


def _as_text(value: Any) -> Any:
    # Migrated records are copied verbatim, so a stored field can hold any JSON value.
    if value is None or isinstance(value, str):
        return value
    return str(value)


def _as_year(value: Any) -> Any:
    if isinstance(value, int) and not isinstance(value, bool):
        return value
    return _as_text(value)


StoredText = Annotated[str | None, BeforeValidator(_as_text)]
StoredYear = Annotated[str | int | None, BeforeValidator(_as_year)]


class GraduateInput(BaseModel):
    """Fields a client may supply for a new graduate; the store adds the rest."""

    model_config = ConfigDict(coerce_numbers_to_str=True)

    code: str | None = None
    name: str | None = None
    department: str | None = None
    year: str | int | None = None
    grade: str | None = None
    feedback: str | None = None
    status: str | None = None


class GraduateRecord(BaseModel):
    """
    A graduate as stored in the `graduates` collection.

    `storeId` is the document id assigned by the store; it is not a document field.
    `code` is the legacy identifier and is carried as metadata only.
    """

    model_config = ConfigDict(extra="ignore", coerce_numbers_to_str=True)

    storeId: str
    code: StoredText = None
    name: StoredText = None
    department: StoredText = None
    year: StoredYear = None
    grade: StoredText = None
    feedback: StoredText = ""
    status: StoredText = UNDER_REVIEW
    fromLocalCache: bool = False
    createdAt: datetime | None = None
    updatedAt: datetime | None = None

    @classmethod
    def from_document(cls, doc: StoredDocument) -> "GraduateRecord":
        return cls.model_validate({**doc.fields, "storeId": doc.id})

    @property
    def status_label(self) -> GraduateStatus:
        return status_label(self.status)

    @property
    def is_approved(self) -> bool:
        return self.status_label == APPROVED

    @property
    def short_id(self) -> str:
        return f"{self.storeId[:8]}..."


class MigrationResult(BaseModel):
    migratedCount: int
    totalCount: int


class GraduatesSummary(TypedDict):
    total: int
    approved: int
    underReview: int


def summarize(records: Iterable[GraduateRecord]) -> GraduatesSummary:
    items = list(records)
    approved = sum(1 for r in items if r.is_approved)
    return {"total": len(items), "approved": approved, "underReview": len(items) - approved}

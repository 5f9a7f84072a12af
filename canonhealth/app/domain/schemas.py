"""API I/O schemas."""
from datetime import datetime
from typing import Any, List, Optional

from pydantic import Field, field_validator

from .models import AccessType, ApiModel, Permissions, RequestStatus


def _card_as_text(value: Any) -> Any:
    """Cards and ids are compared as text; clients sometimes send them as numbers."""
    if isinstance(value, (int, float)) and not isinstance(value, bool):
        return str(value)
    return value


class LoginIn(ApiModel):
    # Optional so a missing field is reported as 400 by the directory.
    role: Optional[str] = None
    name: Optional[str] = None
    email: Optional[str] = None
    health_card: Optional[str] = None

    @field_validator("health_card", mode="before")
    @classmethod
    def card_as_text(cls, value: Any) -> Any:
        return _card_as_text(value)


class AccessRequestIn(ApiModel):
    # Ids stay text here; unknown or non-numeric ones resolve to nobody (404).
    doctor_id: Optional[str] = None
    patient_health_card: Optional[str] = None
    reasons: List[str] = Field(default_factory=list)

    @field_validator("doctor_id", "patient_health_card", mode="before")
    @classmethod
    def numbers_as_text(cls, value: Any) -> Any:
        return _card_as_text(value)

    @field_validator("reasons", mode="before")
    @classmethod
    def reasons_as_tags(cls, value: Any) -> List[str]:
        if not isinstance(value, list):
            return []
        return [str(tag) for tag in value]


class RespondIn(ApiModel):
    approve: bool = False
    access_type: Optional[AccessType] = None
    permissions: Optional[Permissions] = None
    duration_hours: Optional[int] = None


class AccessRequestSummary(ApiModel):
    id: int
    doctor_name: str
    status: RequestStatus
    reasons: List[str]
    created_at: datetime
    decision_at: Optional[datetime] = None
    access_type: Optional[AccessType] = None
    permissions: Optional[Permissions] = None
    duration_hours: Optional[int] = None


class DoctorDocumentOut(ApiModel):
    id: int
    name: str
    uploaded_by_name: str
    upload_date: str
    url: str


class PatientDocumentOut(DoctorDocumentOut):
    sharing_summary: str

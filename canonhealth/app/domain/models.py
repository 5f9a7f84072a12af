"""Domain models shared between API and persistence layers."""
from __future__ import annotations

from datetime import datetime, timezone
from enum import Enum
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel
from sqlalchemy import JSON
from sqlmodel import Column, Field as SQLField, SQLModel


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


class Role(str, Enum):
    PATIENT = "patient"
    DOCTOR = "doctor"


class RequestStatus(str, Enum):
    PENDING = "pending"
    APPROVED = "approved"
    DENIED = "denied"


class AccessType(str, Enum):
    TEMPORARY = "temporary"
    PERMANENT = "permanent"


class ApiModel(BaseModel):
    """Base for read models: camelCase on the wire, built from ORM rows."""

    model_config = ConfigDict(
        from_attributes=True,
        alias_generator=to_camel,
        populate_by_name=True,
    )


class Permissions(ApiModel):
    """Capabilities a patient attaches to a grant.

    Field defaults are the grant a patient gets when approving without
    choosing capabilities explicitly.
    """

    view: bool = True
    download: bool = True
    upload: bool = False
    annotate: bool = True
    imaging: bool = False


class User(SQLModel, table=True):
    __tablename__ = "users"

    id: Optional[int] = SQLField(default=None, primary_key=True)
    role: Role = SQLField(index=True)
    name: str
    email: str
    email_key: str = SQLField(index=True)  # lower-cased email for lookups
    health_card: Optional[str] = SQLField(default=None, index=True)
    created_at: datetime = SQLField(default_factory=utcnow, nullable=False)


class UserRead(ApiModel):
    id: int
    role: Role
    name: str
    email: str
    health_card: Optional[str] = None


class Document(SQLModel, table=True):
    """Uploaded file metadata. Rows are never updated."""

    __tablename__ = "documents"

    id: Optional[int] = SQLField(default=None, primary_key=True)
    name: str
    stored_location: str
    owner_patient_id: int = SQLField(index=True, foreign_key="users.id")
    uploaded_by_id: str
    uploaded_by_name: str
    upload_date: str
    url: str


class DocumentRead(ApiModel):
    id: int
    name: str
    stored_location: str
    owner_patient_id: int
    uploaded_by_id: str
    uploaded_by_name: str
    upload_date: str
    url: str


class AccessRequest(SQLModel, table=True):
    """A doctor's request to list one patient's documents."""

    __tablename__ = "access_requests"

    id: Optional[int] = SQLField(default=None, primary_key=True)
    doctor_id: int = SQLField(index=True, foreign_key="users.id")
    patient_id: int = SQLField(index=True, foreign_key="users.id")
    patient_health_card: str
    reasons: List[str] = SQLField(
        default_factory=list, sa_column=Column(JSON, nullable=False, server_default="[]")
    )
    status: RequestStatus = SQLField(default=RequestStatus.PENDING, index=True)
    created_at: datetime = SQLField(default_factory=utcnow, nullable=False)
    decision_at: Optional[datetime] = SQLField(default=None)
    access_type: Optional[AccessType] = SQLField(default=None)
    permissions: Optional[Dict[str, Any]] = SQLField(
        default=None, sa_column=Column(JSON, nullable=True)
    )
    duration_hours: Optional[int] = SQLField(default=None)


class AccessRequestRead(ApiModel):
    id: int
    doctor_id: int
    patient_id: int
    patient_health_card: str
    reasons: List[str] = Field(default_factory=list)
    status: RequestStatus
    created_at: datetime
    decision_at: Optional[datetime] = None
    access_type: Optional[AccessType] = None
    permissions: Optional[Permissions] = None
    duration_hours: Optional[int] = None


class AccessLog(SQLModel, table=True):
    """One row per visibility decision."""

    __tablename__ = "access_logs"

    id: Optional[int] = SQLField(default=None, primary_key=True)
    actor_id: str = SQLField(index=True)
    role: str
    action: str
    resource: str
    allowed: bool = SQLField(default=True)
    created_at: datetime = SQLField(default_factory=utcnow, nullable=False, index=True)


class AccessLogRead(ApiModel):
    id: int
    actor_id: str
    role: str
    action: str
    resource: str
    allowed: bool
    created_at: datetime

"""Access request engine: the pending -> approved/denied lifecycle."""
from __future__ import annotations

import logging
from typing import Iterable, List, Optional

from sqlalchemy import update
from sqlmodel import Session, select

from ..config import settings
from ..domain.errors import NotFound, UnknownHealthCard, ValidationError
from ..domain.models import (
    AccessRequest,
    AccessType,
    Permissions,
    RequestStatus,
    utcnow,
)
from ..domain.schemas import AccessRequestSummary
from .identity import IdentityDirectory, _as_id

logger = logging.getLogger(__name__)


class AccessRequestEngine:
    """Sole writer of AccessRequest rows.

    Every request transitions out of ``pending`` at most once. Temporary
    grants carry a duration but are never expired here.
    """

    def __init__(self, session: Session, directory: IdentityDirectory | None = None) -> None:
        self.session = session
        self.directory = directory or IdentityDirectory(session)

    def create_request(
        self,
        doctor_id: object,
        patient_health_card: Optional[str],
        reasons: Iterable[str] | None = None,
    ) -> AccessRequest:
        if not doctor_id or not patient_health_card:
            raise ValidationError("doctorId and patientHealthCard are required")

        doctor = self.directory.find_doctor_by_id(doctor_id)
        if doctor is None:
            raise NotFound("Doctor not found")
        patient = self.directory.find_patient_by_health_card(patient_health_card)
        if patient is None:
            raise UnknownHealthCard("Patient with that health card does not exist yet")

        request = AccessRequest(
            doctor_id=doctor.id,
            patient_id=patient.id,
            patient_health_card=patient_health_card,
            reasons=_unique_tags(reasons or []),
            status=RequestStatus.PENDING,
            created_at=utcnow(),
        )
        self.session.add(request)
        self.session.flush()
        self.session.refresh(request)
        logger.info(
            "access request %s: doctor %s -> patient %s", request.id, doctor.id, patient.id
        )
        return request

    def respond(
        self,
        request_id: object,
        approve: bool,
        access_type: Optional[AccessType] = None,
        permissions: Optional[Permissions] = None,
        duration_hours: Optional[int] = None,
    ) -> AccessRequest:
        """Approve or deny a pending request.

        A request that is already decided comes back unchanged.
        """
        request = self.get(request_id)
        if request is None:
            raise NotFound("Request not found")

        if approve:
            grant_type = access_type or AccessType.TEMPORARY
            values = {
                "status": RequestStatus.APPROVED,
                "access_type": grant_type,
                "permissions": (permissions or Permissions()).model_dump(),
                "duration_hours": (
                    (duration_hours or settings.default_duration_hours)
                    if grant_type == AccessType.TEMPORARY
                    else None
                ),
            }
        else:
            values = {
                "status": RequestStatus.DENIED,
                "access_type": None,
                "permissions": None,
                "duration_hours": None,
            }
        values["decision_at"] = utcnow()

        # Guarded on status so a racing second responder matches no row.
        result = self.session.exec(
            update(AccessRequest)
            .where(AccessRequest.id == request.id, AccessRequest.status == RequestStatus.PENDING)
            .values(**values)
        )
        self.session.flush()
        self.session.refresh(request)
        if result.rowcount == 0:
            logger.warning(
                "request %s already %s; ignoring %s",
                request.id,
                request.status.value,
                "approval" if approve else "denial",
            )
        else:
            logger.info("request %s %s", request.id, request.status.value)
        return request

    def get(self, request_id: object) -> Optional[AccessRequest]:
        key = _as_id(request_id)
        return self.session.get(AccessRequest, key) if key is not None else None

    def requests_for_patient(self, patient_id: int) -> List[AccessRequest]:
        stmt = (
            select(AccessRequest)
            .where(AccessRequest.patient_id == patient_id)
            .order_by(AccessRequest.id)
        )
        return list(self.session.exec(stmt).all())

    def list_for_patient(self, patient_id: object) -> List[AccessRequestSummary]:
        if not patient_id:
            raise ValidationError("patientId is required")
        patient = self.directory.find_patient_by_id(patient_id)
        if patient is None:
            raise NotFound("Patient not found")

        summaries = []
        for request in self.requests_for_patient(patient.id):
            doctor = self.directory.find_doctor_by_id(request.doctor_id)
            summaries.append(
                AccessRequestSummary(
                    id=request.id,
                    doctor_name=doctor.name if doctor else "Doctor",
                    status=request.status,
                    reasons=request.reasons,
                    created_at=request.created_at,
                    decision_at=request.decision_at,
                    access_type=request.access_type,
                    permissions=request.permissions,
                    duration_hours=request.duration_hours,
                )
            )
        return summaries

    def approved_for(self, doctor_id: int, patient_id: int) -> List[AccessRequest]:
        stmt = (
            select(AccessRequest)
            .where(
                AccessRequest.doctor_id == doctor_id,
                AccessRequest.patient_id == patient_id,
                AccessRequest.status == RequestStatus.APPROVED,
            )
            .order_by(AccessRequest.id)
        )
        return list(self.session.exec(stmt).all())

    def approved_for_patient(self, patient_id: int) -> List[AccessRequest]:
        stmt = (
            select(AccessRequest)
            .where(
                AccessRequest.patient_id == patient_id,
                AccessRequest.status == RequestStatus.APPROVED,
            )
            .order_by(AccessRequest.decision_at, AccessRequest.id)
        )
        return list(self.session.exec(stmt).all())


def _unique_tags(tags: Iterable[str]) -> List[str]:
    seen: List[str] = []
    for tag in tags:
        if tag not in seen:
            seen.append(tag)
    return seen

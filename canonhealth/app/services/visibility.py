"""Visibility gate: may a doctor list a patient's documents right now?"""
from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import List, Optional

from sqlmodel import Session

from ..domain.errors import Forbidden, NotFound, ValidationError
from ..domain.models import AccessLog, Document, Role, User
from ..domain.policy import CallerContext, grants_visibility
from .access import AccessRequestEngine
from .documents import DocumentStore
from .identity import IdentityDirectory

logger = logging.getLogger(__name__)

VIEW_ACTION = "view_documents"
NO_ACCESS = "No approved access for this patient"


@dataclass
class GateDecision:
    allowed: bool
    patient: Optional[User] = None
    reason: Optional[str] = None


class VisibilityGate:
    """Reads access requests, never writes them. Each decision is logged."""

    def __init__(self, session: Session, directory: IdentityDirectory | None = None) -> None:
        self.session = session
        self.directory = directory or IdentityDirectory(session)
        self.engine = AccessRequestEngine(session, self.directory)

    def can_view(
        self,
        doctor_id: object,
        patient_health_card: Optional[str],
        caller: CallerContext | None = None,
    ) -> GateDecision:
        if not doctor_id or not patient_health_card:
            raise ValidationError("doctorId and patientHealthCard are required")

        doctor = self.directory.find_doctor_by_id(doctor_id)
        if doctor is None:
            raise NotFound("Doctor not found")
        patient = self.directory.find_patient_by_health_card(patient_health_card)
        if patient is None:
            raise NotFound("Patient not found")

        allowed = grants_visibility(self.engine.approved_for(doctor.id, patient.id))
        context = caller or CallerContext(subject_id=str(doctor.id), role=Role.DOCTOR.value)
        self._log(context, patient, allowed)
        if allowed:
            return GateDecision(allowed=True, patient=patient)
        logger.info("doctor %s denied view of patient %s", doctor.id, patient.id)
        return GateDecision(allowed=False, reason=NO_ACCESS)

    def require_view(
        self,
        doctor_id: object,
        patient_health_card: Optional[str],
        caller: CallerContext | None = None,
    ) -> User:
        decision = self.can_view(doctor_id, patient_health_card, caller)
        if not decision.allowed:
            # the request scope rolls back on raise; keep the denial in the audit trail
            self.session.commit()
            raise Forbidden(decision.reason or NO_ACCESS)
        return decision.patient

    def documents_for_doctor(
        self,
        doctor_id: object,
        patient_health_card: Optional[str],
        caller: CallerContext | None = None,
    ) -> List[Document]:
        patient = self.require_view(doctor_id, patient_health_card, caller)
        return DocumentStore(self.session, self.directory).list_for_patient(patient.id)

    def _log(self, context: CallerContext, patient: User, allowed: bool) -> None:
        self.session.add(
            AccessLog(
                actor_id=context.subject_id,
                role=context.role,
                action=VIEW_ACTION,
                resource=f"patient:{patient.id}",
                allowed=allowed,
            )
        )

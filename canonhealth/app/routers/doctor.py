"""Doctor-side routes: request access, then list approved documents."""
from typing import List, Optional

from fastapi import APIRouter, Depends, Query
from sqlmodel import Session

from ..deps import asserted_caller, db_session
from ..domain.models import AccessRequestRead, Role
from ..domain.schemas import AccessRequestIn, DoctorDocumentOut
from ..services.access import AccessRequestEngine
from ..services.visibility import VisibilityGate

router = APIRouter()


@router.post("/requests", response_model=AccessRequestRead)
def create_access_request(payload: AccessRequestIn, session: Session = Depends(db_session)):
    return AccessRequestEngine(session).create_request(
        payload.doctor_id,
        payload.patient_health_card,
        payload.reasons,
    )


@router.get("/documents", response_model=List[DoctorDocumentOut])
def doctor_documents(
    doctor_id: Optional[str] = Query(None, alias="doctorId"),
    patient_health_card: Optional[str] = Query(None, alias="patientHealthCard"),
    session: Session = Depends(db_session),
):
    caller = asserted_caller(doctor_id, Role.DOCTOR.value) if doctor_id else None
    return VisibilityGate(session).documents_for_doctor(doctor_id, patient_health_card, caller)

"""Patient-side routes: own documents and incoming access requests."""
from typing import List, Optional

from fastapi import APIRouter, Depends, Query
from sqlmodel import Session

from ..deps import db_session
from ..domain.models import AccessRequestRead
from ..domain.schemas import AccessRequestSummary, PatientDocumentOut, RespondIn
from ..services.access import AccessRequestEngine
from ..services.documents import DocumentStore

router = APIRouter()


@router.get("/documents", response_model=List[PatientDocumentOut])
def patient_documents(
    patient_id: Optional[str] = Query(None, alias="patientId"),
    session: Session = Depends(db_session),
):
    return DocumentStore(session).patient_view(patient_id)


@router.get("/requests", response_model=List[AccessRequestSummary])
def patient_requests(
    patient_id: Optional[str] = Query(None, alias="patientId"),
    session: Session = Depends(db_session),
):
    return AccessRequestEngine(session).list_for_patient(patient_id)


@router.post("/requests/{request_id}/respond", response_model=AccessRequestRead)
def respond_to_request(
    request_id: str,
    body: RespondIn,
    session: Session = Depends(db_session),
):
    # The responder is not checked against the request's patient.
    return AccessRequestEngine(session).respond(
        request_id,
        approve=body.approve,
        access_type=body.access_type,
        permissions=body.permissions,
        duration_hours=body.duration_hours,
    )

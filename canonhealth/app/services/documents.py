"""Document store: uploaded file metadata per patient."""
from __future__ import annotations

import logging
from datetime import date
from pathlib import Path
from typing import List, Optional

from sqlmodel import Session, select

from ..domain.errors import NotFound, UnknownHealthCard, ValidationError
from ..domain.models import Document
from ..domain.schemas import PatientDocumentOut
from ..infra.storage import stored_name_for, write_blob
from .access import AccessRequestEngine
from .identity import IdentityDirectory

logger = logging.getLogger(__name__)

PRIVATE_SUMMARY = "Only you can view this."


class DocumentStore:
    def __init__(
        self,
        session: Session,
        directory: IdentityDirectory | None = None,
        uploads_dir: Path | None = None,
    ) -> None:
        self.session = session
        self.directory = directory or IdentityDirectory(session)
        self.uploads_dir = uploads_dir

    def record(self, doc: Document) -> Document:
        self.session.add(doc)
        self.session.flush()
        self.session.refresh(doc)
        return doc

    def upload(
        self,
        filename: Optional[str],
        data: Optional[bytes],
        owner_health_card: Optional[str],
        uploaded_by_id: Optional[str],
    ) -> Document:
        """Store a file for the patient holding ``owner_health_card``.

        Anyone who knows the card may upload; the uploader is not checked.
        Nothing is written until every field has been validated.
        """
        if not filename or data is None:
            raise ValidationError("File is required")
        if not owner_health_card or not uploaded_by_id:
            raise ValidationError("ownerHealthCard and uploadedById are required")

        patient = self.directory.find_patient_by_health_card(owner_health_card)
        if patient is None:
            raise UnknownHealthCard("No patient found with that health card")
        uploader = self.directory.get(uploaded_by_id)

        stored = stored_name_for(filename)
        # row first: a failed flush leaves no file behind, a failed write rolls the row back
        doc = self.record(
            Document(
                name=filename,
                stored_location=stored,
                owner_patient_id=patient.id,
                uploaded_by_id=str(uploaded_by_id),
                uploaded_by_name=uploader.name if uploader else "Unknown",
                upload_date=date.today().isoformat(),
                url=f"/uploads/{stored}",
            )
        )
        write_blob(stored, data, self.uploads_dir)
        logger.info("stored upload %s for patient %s", stored, patient.id)
        return doc

    def list_for_patient(self, patient_id: int) -> List[Document]:
        stmt = (
            select(Document)
            .where(Document.owner_patient_id == patient_id)
            .order_by(Document.id)
        )
        return list(self.session.exec(stmt).all())

    def sharing_summary(self, patient_id: int) -> str:
        names: List[str] = []
        for request in AccessRequestEngine(self.session, self.directory).approved_for_patient(
            patient_id
        ):
            doctor = self.directory.find_doctor_by_id(request.doctor_id)
            if doctor is None:
                continue
            name = doctor.name or "Doctor"
            if name not in names:
                names.append(name)
        if not names:
            return PRIVATE_SUMMARY
        return "Shared with " + ", ".join(names)

    def patient_view(self, patient_id: object) -> List[PatientDocumentOut]:
        """Documents as the owning patient sees them, each with the sharing summary."""
        if not patient_id:
            raise ValidationError("patientId is required")
        patient = self.directory.find_patient_by_id(patient_id)
        if patient is None:
            raise NotFound("Patient not found")

        summary = self.sharing_summary(patient.id)
        return [
            PatientDocumentOut(
                id=doc.id,
                name=doc.name,
                uploaded_by_name=doc.uploaded_by_name,
                upload_date=doc.upload_date,
                url=doc.url,
                sharing_summary=summary,
            )
            for doc in self.list_for_patient(patient.id)
        ]

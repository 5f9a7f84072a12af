"""Document upload (patient or doctor)."""
from typing import Optional

from fastapi import APIRouter, Depends, File, Form, UploadFile
from sqlmodel import Session

from ..deps import db_session
from ..domain.models import DocumentRead
from ..services.documents import DocumentStore

router = APIRouter()


@router.post("/upload", response_model=DocumentRead)
def upload_document(
    file: Optional[UploadFile] = File(None),
    owner_health_card: Optional[str] = Form(None, alias="ownerHealthCard"),
    uploaded_by_id: Optional[str] = Form(None, alias="uploadedById"),
    session: Session = Depends(db_session),
):
    return DocumentStore(session).upload(
        filename=file.filename if file else None,
        data=file.file.read() if file else None,
        owner_health_card=owner_health_card,
        uploaded_by_id=uploaded_by_id,
    )

"""Login-style identity resolution."""
from fastapi import APIRouter, Depends
from sqlmodel import Session

from ..deps import db_session
from ..domain.models import UserRead
from ..domain.schemas import LoginIn
from ..services.identity import IdentityDirectory

router = APIRouter()


@router.post("/login", response_model=UserRead)
def login(payload: LoginIn, session: Session = Depends(db_session)):
    """Resolve the (role, email) identity, creating it on first login."""
    return IdentityDirectory(session).resolve_or_create(
        role=payload.role,
        name=payload.name,
        email=payload.email,
        health_card=payload.health_card,
    )

"""Caller context and the document visibility rule."""
from dataclasses import dataclass
from typing import Iterable

from .models import AccessRequest, RequestStatus


@dataclass
class CallerContext:
    subject_id: str
    role: str  # "doctor" or "patient"


def grants_visibility(requests: Iterable[AccessRequest]) -> bool:
    """Any approved request unlocks listing, whatever its permission flags."""
    return any(request.status == RequestStatus.APPROVED for request in requests)

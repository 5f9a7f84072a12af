"""Identity directory: users keyed by role and case-insensitive email."""
from __future__ import annotations

import logging
from typing import Optional

from sqlmodel import Session, select

from ..domain.errors import ValidationError
from ..domain.models import Role, User

logger = logging.getLogger(__name__)

DEFAULT_NAMES = {Role.DOCTOR: "Doctor", Role.PATIENT: "Patient"}


class IdentityDirectory:
    def __init__(self, session: Session) -> None:
        self.session = session

    def resolve_or_create(
        self,
        role: Optional[str],
        name: Optional[str],
        email: Optional[str],
        health_card: Optional[str] = None,
    ) -> User:
        """Return the user for (role, email), creating it on first sight.

        A patient without a health card gets one back-filled the first time a
        non-empty card is supplied. An existing card is never replaced.
        """
        if not role or not email or not email.strip():
            raise ValidationError("role and email are required")
        try:
            user_role = Role(role)
        except ValueError as exc:
            raise ValidationError("role must be 'patient' or 'doctor'") from exc

        email_key = email.strip().lower()
        user = self.session.exec(
            select(User).where(User.role == user_role, User.email_key == email_key)
        ).first()

        if user is None:
            user = User(
                role=user_role,
                name=name.strip() if name and name.strip() else DEFAULT_NAMES[user_role],
                email=email.strip(),
                email_key=email_key,
                health_card=(health_card or None) if user_role == Role.PATIENT else None,
            )
            self.session.add(user)
            self.session.flush()
            self.session.refresh(user)
            logger.info("created %s user %s", user_role.value, user.id)
        elif user_role == Role.PATIENT and health_card and not user.health_card:
            user.health_card = health_card
            self.session.add(user)
            self.session.flush()
            logger.info("back-filled health card for patient %s", user.id)
        return user

    def get(self, user_id: object) -> Optional[User]:
        key = _as_id(user_id)
        return self.session.get(User, key) if key is not None else None

    def find_patient_by_id(self, patient_id: object) -> Optional[User]:
        return self._with_role(self.get(patient_id), Role.PATIENT)

    def find_doctor_by_id(self, doctor_id: object) -> Optional[User]:
        return self._with_role(self.get(doctor_id), Role.DOCTOR)

    def find_patient_by_health_card(self, card: Optional[str]) -> Optional[User]:
        if not card:
            return None
        return self.session.exec(
            select(User)
            .where(User.role == Role.PATIENT, User.health_card == str(card))
            .order_by(User.id)
        ).first()

    @staticmethod
    def _with_role(user: Optional[User], role: Role) -> Optional[User]:
        if user is None or user.role != role:
            return None
        return user


def _as_id(value: object) -> Optional[int]:
    """Ids arrive from query strings and form fields; non-numeric ones match nobody."""
    try:
        return int(value)  # type: ignore[arg-type]
    except (TypeError, ValueError):
        return None

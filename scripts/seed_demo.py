#!/usr/bin/env python3
"""Seed the Canon Health DB with a demo patient, doctors and access requests."""
from __future__ import annotations

import argparse

from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlmodel import Session

from canonhealth.app.domain.models import AccessType, Document, Permissions
from canonhealth.app.infra.db import init_db, reset_db
from canonhealth.app.services.access import AccessRequestEngine
from canonhealth.app.services.documents import DocumentStore
from canonhealth.app.services.identity import IdentityDirectory


def parse_args() -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Seed DB with demo users and requests")
    parser.add_argument("--patients", type=int, default=2)
    parser.add_argument("--database-url", default="sqlite:///./canonhealth.db")
    parser.add_argument(
        "--reset",
        action="store_true",
        help="drop existing tables first; without it, already-seeded patients are skipped",
    )
    return parser.parse_args()


def seed_patient(db: Session, idx: int) -> bool:
    """Seed one demo patient. Returns False when the patient was seeded before."""
    directory = IdentityDirectory(db)
    card = f"HC-{idx:04}"
    patient = directory.resolve_or_create(
        "patient", f"Demo Patient {idx}", f"patient{idx}@example.com", card
    )
    store = DocumentStore(db, directory)
    if store.list_for_patient(patient.id):
        return False
    approved_doctor = directory.resolve_or_create(
        "doctor", f"Dr. Demo {idx}", f"doctor{idx}@example.com"
    )
    pending_doctor = directory.resolve_or_create(
        "doctor", f"Dr. Waiting {idx}", f"waiting{idx}@example.com"
    )

    store.record(
        Document(
            name=f"checkup-{idx}.pdf",
            stored_location=f"seed-{idx}-checkup.pdf",
            owner_patient_id=patient.id,
            uploaded_by_id=str(patient.id),
            uploaded_by_name=patient.name,
            upload_date="2026-01-01",
            url=f"/uploads/seed-{idx}-checkup.pdf",
        )
    )

    engine = AccessRequestEngine(db, directory)
    granted = engine.create_request(approved_doctor.id, card, ["follow_up"])
    engine.respond(
        granted.id,
        approve=True,
        access_type=AccessType.PERMANENT,
        permissions=Permissions(download=False),
    )
    engine.create_request(pending_doctor.id, card, ["second_opinion"])
    return True


def main() -> int:
    args = parse_args()
    engine = create_engine(args.database_url, future=True)
    if args.reset:
        reset_db(engine)
    else:
        init_db(engine)
    SessionLocal = sessionmaker(bind=engine, class_=Session, autoflush=False)
    with SessionLocal() as db:
        seeded = sum(seed_patient(db, idx) for idx in range(1, args.patients + 1))
        db.commit()
    print(f"Seeded {seeded} demo patients ({args.patients - seeded} already present).")
    return 0


if __name__ == "__main__":
    raise SystemExit(main())

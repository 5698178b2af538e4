from __future__ import annotations

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from clinic.api.common import datastore_guard, serialize_appointment, serialize_contact, serialize_doctor
from clinic.core.config import Settings
from clinic.core.deps import DOCTOR_ONLY_MESSAGE, Principal, get_settings, require_role
from clinic.core.errors import NotFound
from clinic.db.session import get_db
from clinic.models.appointment import Appointment
from clinic.models.common import utcnow
from clinic.models.contact import Contact
from clinic.models.doctor import Doctor
from clinic.schemas.public import LoginIn
from clinic.services.accounts import ROLE_DOCTOR, authenticate_doctor, issue_doctor_token

router = APIRouter()

DOCTOR_CONTACTS_LIMIT = 50

require_doctor = require_role(ROLE_DOCTOR, message=DOCTOR_ONLY_MESSAGE)


def _doctor_or_404(db: Session, doctor_id: int) -> Doctor:
    doctor = db.get(Doctor, doctor_id)
    if doctor is None:
        raise NotFound("Doctor not found")
    return doctor


@router.post("/login")
def login(
    payload: LoginIn,
    db: Session = Depends(get_db),
    settings: Settings = Depends(get_settings),
):
    with datastore_guard(db, "Login failed"):
        doctor = authenticate_doctor(db, payload.email, payload.password)
    token = issue_doctor_token(settings, doctor)
    return {
        "success": True,
        "message": "Login successful",
        "token": token,
        "user": {
            "id": doctor.id,
            "name": doctor.name,
            "email": doctor.email,
            "department": doctor.department,
            "phone": doctor.phone,
        },
    }


@router.get("/me")
def me(principal: Principal = Depends(require_doctor), db: Session = Depends(get_db)):
    with datastore_guard(db, "Failed to fetch doctor profile"):
        doctor = _doctor_or_404(db, principal.id)
    return {"success": True, "doctor": serialize_doctor(doctor)}


@router.get("/appointments")
def doctor_appointments(principal: Principal = Depends(require_doctor), db: Session = Depends(get_db)):
    with datastore_guard(db, "Failed to fetch appointments"):
        doctor = _doctor_or_404(db, principal.id)
        rows = (
            db.query(Appointment)
            .filter(Appointment.doctor.contains(doctor.name, autoescape=True))
            .order_by(Appointment.appointment_date.desc(), Appointment.appointment_time.desc())
            .all()
        )

    today = utcnow().date().isoformat()
    statuses = [row.status for row in rows]
    return {
        "success": True,
        "appointments": [serialize_appointment(row) for row in rows],
        "stats": {
            "total": len(rows),
            "today": sum(1 for row in rows if row.appointment_date == today),
            "pending": statuses.count("pending"),
            "confirmed": statuses.count("confirmed"),
            "completed": statuses.count("completed"),
        },
    }


@router.get("/contacts")
def doctor_contacts(principal: Principal = Depends(require_doctor), db: Session = Depends(get_db)):
    with datastore_guard(db, "Failed to fetch contacts"):
        rows = (
            db.query(Contact)
            .order_by(Contact.created_at.desc(), Contact.id.desc())
            .limit(DOCTOR_CONTACTS_LIMIT)
            .all()
        )
    return {"success": True, "contacts": [serialize_contact(row) for row in rows]}

from __future__ import annotations

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from clinic.api.common import datastore_guard, serialize_appointment, serialize_contact, serialize_patient
from clinic.core.deps import Principal, require_role
from clinic.core.errors import NotFound
from clinic.db.session import get_db
from clinic.models.appointment import Appointment
from clinic.models.contact import Contact
from clinic.models.patient import Patient
from clinic.services.accounts import ROLE_ADMIN

router = APIRouter()

require_admin = require_role(ROLE_ADMIN)


def _delete_or_404(db: Session, model, row_id: int, label: str) -> None:
    row = db.get(model, row_id)
    if row is None:
        raise NotFound(f"{label} not found")
    db.delete(row)
    db.commit()


@router.get("/contacts")
def list_contacts(admin: Principal = Depends(require_admin), db: Session = Depends(get_db)):
    with datastore_guard(db, "Failed to fetch contacts"):
        rows = db.query(Contact).order_by(Contact.created_at.desc(), Contact.id.desc()).all()
    return [serialize_contact(row) for row in rows]


@router.delete("/contacts/{contact_id}")
def delete_contact(contact_id: int, admin: Principal = Depends(require_admin), db: Session = Depends(get_db)):
    with datastore_guard(db, "Failed to delete contact"):
        _delete_or_404(db, Contact, contact_id, "Contact")
    return {"success": True, "message": "Contact deleted"}


@router.get("/appointments")
def list_appointments(admin: Principal = Depends(require_admin), db: Session = Depends(get_db)):
    with datastore_guard(db, "Failed to fetch appointments"):
        rows = db.query(Appointment).order_by(Appointment.created_at.desc(), Appointment.id.desc()).all()
    return [serialize_appointment(row) for row in rows]


@router.delete("/appointments/{appointment_id}")
def delete_appointment(appointment_id: int, admin: Principal = Depends(require_admin), db: Session = Depends(get_db)):
    with datastore_guard(db, "Failed to delete appointment"):
        _delete_or_404(db, Appointment, appointment_id, "Appointment")
    return {"success": True, "message": "Appointment deleted"}


@router.get("/patients")
def list_patients(admin: Principal = Depends(require_admin), db: Session = Depends(get_db)):
    with datastore_guard(db, "Failed to fetch patients"):
        rows = db.query(Patient).order_by(Patient.created_at.desc(), Patient.id.desc()).all()
    return [serialize_patient(row) for row in rows]


@router.delete("/patients/{patient_id}")
def delete_patient(patient_id: int, admin: Principal = Depends(require_admin), db: Session = Depends(get_db)):
    with datastore_guard(db, "Failed to delete patient"):
        _delete_or_404(db, Patient, patient_id, "Patient")
    return {"success": True, "message": "Patient deleted"}

from __future__ import annotations

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from clinic.api.common import datastore_guard, serialize_appointment
from clinic.core.deps import Principal, require_role
from clinic.core.errors import NotFound
from clinic.db.session import get_db
from clinic.models.appointment import Appointment
from clinic.models.patient import Patient
from clinic.schemas.public import AppointmentCreate, AppointmentStatusUpdate
from clinic.services.accounts import ROLE_ADMIN, ROLE_DOCTOR, ROLE_PATIENT

router = APIRouter()


@router.post("/appointments")
def book_appointment(
    payload: AppointmentCreate,
    principal: Principal = Depends(require_role(ROLE_PATIENT)),
    db: Session = Depends(get_db),
):
    with datastore_guard(db, "Failed to book appointment"):
        patient = db.get(Patient, principal.id)
        if patient is None:
            raise NotFound("Patient not found")
        row = Appointment(
            patient_name=patient.full_name,
            patient_phone=patient.phone,
            patient_email=patient.email,
            patient_age=None,
            patient_gender=patient.gender or "",
            department=payload.department,
            doctor=payload.doctor,
            appointment_date=payload.appointment_date,
            appointment_time=payload.appointment_time,
            consultation_type=payload.consultation_type,
            symptoms=payload.symptoms or "",
            status="pending",
        )
        db.add(row)
        db.commit()
        db.refresh(row)
    return {"success": True, "message": "Appointment booked successfully", "id": row.id}


@router.get("/my-appointments")
def my_appointments(
    principal: Principal = Depends(require_role(ROLE_PATIENT)),
    db: Session = Depends(get_db),
):
    with datastore_guard(db, "Failed to fetch appointments"):
        rows = (
            db.query(Appointment)
            .filter(Appointment.patient_email == principal.email)
            .order_by(Appointment.created_at.desc(), Appointment.id.desc())
            .all()
        )
    return [serialize_appointment(row) for row in rows]


@router.put("/appointments/{appointment_id}/status")
def update_appointment_status(
    appointment_id: int,
    payload: AppointmentStatusUpdate,
    principal: Principal = Depends(require_role(ROLE_DOCTOR, ROLE_ADMIN)),
    db: Session = Depends(get_db),
):
    with datastore_guard(db, "Failed to update appointment status"):
        row = db.get(Appointment, appointment_id)
        if row is None:
            raise NotFound("Appointment not found")
        row.status = payload.status
        db.commit()
    return {"success": True, "message": "Appointment status updated"}

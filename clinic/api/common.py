from __future__ import annotations

import logging
from contextlib import contextmanager
from datetime import datetime
from typing import Any, Iterator

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from clinic.core.errors import Internal
from clinic.models.appointment import Appointment
from clinic.models.common import as_utc
from clinic.models.contact import Contact
from clinic.models.doctor import Doctor
from clinic.models.patient import Patient

logger = logging.getLogger("clinic.api")


@contextmanager
def datastore_guard(db: Session, message: str) -> Iterator[None]:
    """Turn datastore failures into a generic 500 carrying ``message``."""
    try:
        yield
    except SQLAlchemyError as exc:
        db.rollback()
        logger.error("%s: datastore error", message, exc_info=exc)
        raise Internal(message) from exc


def _iso(value: datetime | None) -> str | None:
    value = as_utc(value)
    return value.isoformat() if value else None


def serialize_contact(row: Contact) -> dict[str, Any]:
    return {
        "id": row.id,
        "name": row.name,
        "phone": row.phone,
        "email": row.email,
        "subject": row.subject,
        "message": row.message,
        "created_at": _iso(row.created_at),
    }


def serialize_appointment(row: Appointment) -> dict[str, Any]:
    return {
        "id": row.id,
        "patient_name": row.patient_name,
        "patient_phone": row.patient_phone,
        "patient_email": row.patient_email,
        "patient_age": row.patient_age,
        "patient_gender": row.patient_gender,
        "department": row.department,
        "doctor": row.doctor,
        "appointment_date": row.appointment_date,
        "appointment_time": row.appointment_time,
        "consultation_type": row.consultation_type,
        "symptoms": row.symptoms,
        "status": row.status,
        "created_at": _iso(row.created_at),
    }


def serialize_patient(row: Patient) -> dict[str, Any]:
    return {
        "id": row.id,
        "first_name": row.first_name,
        "last_name": row.last_name,
        "email": row.email,
        "phone": row.phone,
        "dob": row.dob,
        "gender": row.gender,
        "address": row.address,
        "email_verified": bool(row.email_verified),
        "phone_verified": bool(row.phone_verified),
        "created_at": _iso(row.created_at),
    }


def serialize_doctor(row: Doctor) -> dict[str, Any]:
    return {
        "id": row.id,
        "name": row.name,
        "email": row.email,
        "department": row.department,
        "phone": row.phone,
        "created_at": _iso(row.created_at),
    }

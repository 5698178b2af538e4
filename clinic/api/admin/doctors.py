from __future__ import annotations

from fastapi import APIRouter, Depends
from sqlalchemy import func
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from clinic.api.common import datastore_guard, serialize_doctor
from clinic.core.config import Settings
from clinic.core.deps import Principal, get_settings, require_role
from clinic.core.errors import Conflict, NotFound
from clinic.core.security import hash_password
from clinic.db.session import get_db
from clinic.models.doctor import Doctor
from clinic.schemas.admin import DoctorUpsert
from clinic.services.accounts import ROLE_ADMIN, normalize_email

router = APIRouter()

require_admin = require_role(ROLE_ADMIN)


def _email_taken(db: Session, email: str, *, exclude_id: int | None = None) -> bool:
    query = db.query(Doctor.id).filter(func.lower(Doctor.email) == email)
    if exclude_id is not None:
        query = query.filter(Doctor.id != exclude_id)
    return query.first() is not None


@router.get("")
def list_doctors(admin: Principal = Depends(require_admin), db: Session = Depends(get_db)):
    with datastore_guard(db, "Failed to fetch doctors"):
        rows = db.query(Doctor).order_by(Doctor.created_at.desc(), Doctor.id.desc()).all()
    return [serialize_doctor(row) for row in rows]


@router.post("")
def create_doctor(
    payload: DoctorUpsert,
    admin: Principal = Depends(require_admin),
    db: Session = Depends(get_db),
    settings: Settings = Depends(get_settings),
):
    email = normalize_email(payload.email)
    with datastore_guard(db, "Failed to add doctor"):
        if _email_taken(db, email):
            raise Conflict("Email already exists")
        password = str(payload.password or "").strip() or str(settings.DOCTOR_SEED_PASSWORD or "")
        row = Doctor(
            name=payload.name,
            email=email,
            password=hash_password(password),
            department=payload.department,
            phone=payload.phone or "",
        )
        db.add(row)
        try:
            db.commit()
        except IntegrityError as exc:
            db.rollback()
            raise Conflict("Email already exists") from exc
        db.refresh(row)
    return {"success": True, "message": "Doctor added successfully", "id": row.id}


@router.put("/{doctor_id}")
def update_doctor(
    doctor_id: int,
    payload: DoctorUpsert,
    admin: Principal = Depends(require_admin),
    db: Session = Depends(get_db),
):
    email = normalize_email(payload.email)
    with datastore_guard(db, "Failed to update doctor"):
        row = db.get(Doctor, doctor_id)
        if row is None:
            raise NotFound("Doctor not found")
        if _email_taken(db, email, exclude_id=doctor_id):
            raise Conflict("Email already used by another doctor")
        row.name = payload.name
        row.email = email
        row.department = payload.department
        row.phone = payload.phone or ""
        if str(payload.password or "").strip():
            row.password = hash_password(payload.password)
        try:
            db.commit()
        except IntegrityError as exc:
            db.rollback()
            raise Conflict("Email already used by another doctor") from exc
    return {"success": True, "message": "Doctor updated successfully"}


@router.delete("/{doctor_id}")
def delete_doctor(doctor_id: int, admin: Principal = Depends(require_admin), db: Session = Depends(get_db)):
    with datastore_guard(db, "Failed to delete doctor"):
        row = db.get(Doctor, doctor_id)
        if row is None:
            raise NotFound("Doctor not found")
        db.delete(row)
        db.commit()
    return {"success": True, "message": "Doctor deleted"}

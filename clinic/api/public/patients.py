from __future__ import annotations

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from clinic.api.common import datastore_guard
from clinic.core.config import Settings
from clinic.core.deps import Principal, get_settings, require_role
from clinic.core.errors import NotFound
from clinic.db.session import get_db
from clinic.models.patient import Patient
from clinic.schemas.public import LoginIn, PatientRegister
from clinic.services.accounts import (
    ROLE_PATIENT,
    authenticate_patient,
    issue_patient_token,
    register_patient,
)

router = APIRouter()


@router.post("/register")
def register(
    payload: PatientRegister,
    db: Session = Depends(get_db),
    settings: Settings = Depends(get_settings),
):
    with datastore_guard(db, "Failed to register. Please try again."):
        patient = register_patient(db, settings, payload)
    return {"success": True, "message": "Registration successful! You can now login.", "id": patient.id}


@router.post("/login")
def login(
    payload: LoginIn,
    db: Session = Depends(get_db),
    settings: Settings = Depends(get_settings),
):
    with datastore_guard(db, "Login failed"):
        patient = authenticate_patient(db, payload.email, payload.password)
    token = issue_patient_token(settings, patient)
    return {
        "success": True,
        "message": "Login successful",
        "token": token,
        "user": {
            "id": patient.id,
            "firstName": patient.first_name,
            "lastName": patient.last_name,
            "email": patient.email,
            "phone": patient.phone,
        },
    }


@router.get("/me")
def me(
    principal: Principal = Depends(require_role(ROLE_PATIENT)),
    db: Session = Depends(get_db),
):
    with datastore_guard(db, "Failed to fetch user info"):
        patient = db.get(Patient, principal.id)
    if patient is None:
        raise NotFound("Patient not found")
    return {
        "success": True,
        "user": {
            "id": patient.id,
            "first_name": patient.first_name,
            "last_name": patient.last_name,
            "email": patient.email,
            "phone": patient.phone,
        },
    }

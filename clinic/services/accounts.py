from __future__ import annotations

import logging
import secrets
from datetime import timedelta

from sqlalchemy import func
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from clinic.core.config import Settings
from clinic.core.errors import Conflict, InvalidCredentials, ValidationError
from clinic.core.security import encode_session_token, hash_password, verify_password
from clinic.models.doctor import Doctor
from clinic.models.otp_code import OTP_PURPOSE_EMAIL
from clinic.models.patient import Patient
from clinic.schemas.public import PatientRegister
from clinic.services.otp_service import find_registration_otp

logger = logging.getLogger("clinic.accounts")

ROLE_PATIENT = "patient"
ROLE_DOCTOR = "doctor"
ROLE_ADMIN = "admin"
ADMIN_SUBJECT_ID = 0


def normalize_email(raw: str | None) -> str:
    return str(raw or "").strip().lower()


def get_patient_by_email(db: Session, email: str) -> Patient | None:
    normalized = normalize_email(email)
    if not normalized:
        return None
    return db.query(Patient).filter(func.lower(Patient.email) == normalized).first()


def get_doctor_by_email(db: Session, email: str) -> Doctor | None:
    normalized = normalize_email(email)
    if not normalized:
        return None
    return db.query(Doctor).filter(func.lower(Doctor.email) == normalized).first()


def register_patient(db: Session, settings: Settings, payload: PatientRegister) -> Patient:
    if not str(payload.email_otp or "").strip():
        raise ValidationError("Email OTP verification is required")

    email = normalize_email(payload.email)
    # The ledger's verified flag is the proof; the submitted code is not re-checked.
    find_registration_otp(db, settings, email, OTP_PURPOSE_EMAIL)

    if get_patient_by_email(db, email) is not None:
        raise Conflict("Email already registered")

    patient = Patient(
        first_name=payload.first_name,
        last_name=payload.last_name,
        email=email,
        phone=payload.phone,
        password=hash_password(payload.password),
        dob=payload.dob or "",
        gender=payload.gender or "",
        address=payload.address or "",
        email_verified=True,
        phone_verified=False,
    )
    db.add(patient)
    try:
        db.commit()
    except IntegrityError as exc:
        db.rollback()
        if get_patient_by_email(db, email) is not None:
            raise Conflict("Email already registered") from exc
        raise Conflict("Phone number already registered") from exc
    db.refresh(patient)
    logger.info("patient registered id=%s", patient.id)
    return patient


def authenticate_patient(db: Session, email: str, password: str) -> Patient:
    patient = get_patient_by_email(db, email)
    if patient is None or not verify_password(password, patient.password):
        raise InvalidCredentials()
    return patient


def authenticate_doctor(db: Session, email: str, password: str) -> Doctor:
    doctor = get_doctor_by_email(db, email)
    if doctor is None or not verify_password(password, doctor.password):
        raise InvalidCredentials()
    return doctor


def authenticate_admin(settings: Settings, email: str, password: str) -> str:
    expected_email = normalize_email(settings.ADMIN_EMAIL)
    email_ok = secrets.compare_digest(normalize_email(email).encode(), expected_email.encode())
    password_ok = secrets.compare_digest(str(password or "").encode(), str(settings.ADMIN_PASSWORD or "").encode())
    if not expected_email or not email_ok or not password_ok:
        raise InvalidCredentials()
    return expected_email


def _session_token(settings: Settings, claims: dict) -> str:
    return encode_session_token(
        claims,
        secret=settings.JWT_SECRET,
        ttl=timedelta(hours=int(settings.JWT_TTL_HOURS)),
    )


def issue_patient_token(settings: Settings, patient: Patient) -> str:
    return _session_token(
        settings,
        {"sub": str(patient.id), "id": patient.id, "email": patient.email, "role": ROLE_PATIENT},
    )


def issue_doctor_token(settings: Settings, doctor: Doctor) -> str:
    return _session_token(
        settings,
        {
            "sub": str(doctor.id),
            "id": doctor.id,
            "email": doctor.email,
            "role": ROLE_DOCTOR,
            "name": doctor.name,
            "department": doctor.department,
        },
    )


def issue_admin_token(settings: Settings, email: str) -> str:
    return _session_token(
        settings,
        {"sub": str(ADMIN_SUBJECT_ID), "id": ADMIN_SUBJECT_ID, "email": email, "role": ROLE_ADMIN},
    )

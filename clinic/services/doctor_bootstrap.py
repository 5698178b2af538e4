from __future__ import annotations

import logging

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from clinic.core.config import Settings
from clinic.core.security import hash_password
from clinic.models.doctor import Doctor

logger = logging.getLogger("clinic.bootstrap")

# name, email, department, phone
CLINIC_DOCTORS: tuple[tuple[str, str, str, str], ...] = (
    ("Dr. Pawan Pandey", "pawan@healthplus.com", "General Medicine", "7052691142"),
    ("Dr. Anuradha", "anuradha@healthplus.com", "Pediatrics", "7052691143"),
    ("Dr. Kaushal Kumar", "kaushal@healthplus.com", "Cardiology", "7052691144"),
    ("Dr. Mudit Dubey", "mudit@healthplus.com", "Dermatology", "7052691145"),
    ("Dr. Anupama Srivastva", "anupama@healthplus.com", "Gynecology", "7052691146"),
    ("Dr. Abhay Yadav", "abhay@healthplus.com", "Psychiatry", "7052691147"),
    ("Dr. Shahil Ansari", "shahil@healthplus.com", "Neurology", "7052691148"),
    ("Dr. Priya Singh", "priya@healthplus.com", "Ophthalmology", "7052691149"),
    ("Dr. Rajesh Verma", "rajesh@healthplus.com", "Orthopedics", "7052691150"),
    ("Dr. Sunita Sharma", "sunita@healthplus.com", "Dentistry", "7052691151"),
    ("Dr. Amit Gupta", "amit@healthplus.com", "ENT", "7052691152"),
    ("Dr. Neha Agarwal", "neha@healthplus.com", "Physiotherapy", "7052691153"),
)


def ensure_clinic_doctors(db: Session, settings: Settings) -> int:
    """Insert the clinic's doctors that are not in the table yet. Returns the number added."""
    if not settings.DOCTOR_SEED_ENABLED:
        return 0

    existing = {str(email).lower() for (email,) in db.query(Doctor.email).all()}
    missing = [row for row in CLINIC_DOCTORS if row[1] not in existing]
    if not missing:
        return 0

    password_hash = hash_password(str(settings.DOCTOR_SEED_PASSWORD or ""))
    for name, email, department, phone in missing:
        db.add(Doctor(name=name, email=email, password=password_hash, department=department, phone=phone))
    try:
        db.commit()
    except IntegrityError:
        # Another worker seeded concurrently.
        db.rollback()
        return 0
    logger.info("seeded %s clinic doctors", len(missing))
    return len(missing)

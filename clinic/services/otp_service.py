"""One-time code issuance and verification.

A code is scoped by ``(identifier, type)``. Issuing replaces every earlier
code for the pair, verification flips ``verified`` exactly once through a
conditional update, and registration only accepts a verified code created
within the configured window.
"""

from __future__ import annotations

import logging
import secrets
from dataclasses import dataclass
from datetime import datetime, timedelta

from sqlalchemy.orm import Session

from clinic.core.config import Settings
from clinic.core.errors import (
    EmailNotVerified,
    OtpExpired,
    OtpMismatch,
    OtpNotFound,
    ValidationError,
    VerificationExpired,
)
from clinic.models.common import as_utc, utcnow
from clinic.models.otp_code import OTP_PURPOSE_EMAIL, OTP_PURPOSES, OtpCode
from clinic.services.email_service import EmailDeliveryError, send_otp_email

logger = logging.getLogger("clinic.otp")

OTP_CODE_MIN = 100_000
OTP_CODE_SPAN = 900_000


@dataclass(frozen=True)
class IssuedOtp:
    otp_id: int
    code: str
    expires_at: datetime
    delivered: bool
    delivery_error: str | None = None


def _now_utc() -> datetime:
    return utcnow()


def generate_code() -> str:
    return str(OTP_CODE_MIN + secrets.randbelow(OTP_CODE_SPAN))


def normalize_purpose(raw: str | None) -> str:
    purpose = str(raw or "").strip().lower()
    if purpose not in OTP_PURPOSES:
        raise ValidationError("Unsupported OTP type")
    return purpose


def normalize_identifier(raw: str | None, purpose: str) -> str:
    value = str(raw or "").strip()
    if purpose == OTP_PURPOSE_EMAIL:
        return value.lower()
    return value


def _latest(db: Session, identifier: str, purpose: str, *, verified: bool) -> OtpCode | None:
    return (
        db.query(OtpCode)
        .filter(
            OtpCode.identifier == identifier,
            OtpCode.type == purpose,
            OtpCode.verified.is_(verified),
        )
        .order_by(OtpCode.created_at.desc(), OtpCode.id.desc())
        .first()
    )


def latest_active_otp(db: Session, identifier: str, purpose: str = OTP_PURPOSE_EMAIL) -> OtpCode | None:
    purpose = normalize_purpose(purpose)
    return _latest(db, normalize_identifier(identifier, purpose), purpose, verified=False)


def issue_otp(db: Session, settings: Settings, identifier: str | None, purpose: str = OTP_PURPOSE_EMAIL) -> IssuedOtp:
    purpose = normalize_purpose(purpose)
    identifier = normalize_identifier(identifier, purpose)
    if purpose == OTP_PURPOSE_EMAIL and "@" not in identifier:
        raise ValidationError("Valid email address is required")

    code = generate_code()
    expires_at = _now_utc() + timedelta(minutes=int(settings.OTP_TTL_MINUTES))

    try:
        db.query(OtpCode).filter(OtpCode.identifier == identifier, OtpCode.type == purpose).delete(
            synchronize_session=False
        )
        row = OtpCode(identifier=identifier, otp_code=code, type=purpose, expires_at=expires_at, verified=False)
        db.add(row)
        db.commit()
    except Exception:
        db.rollback()
        raise
    db.refresh(row)
    logger.info("otp issued id=%s type=%s identifier=%s", row.id, purpose, identifier)

    try:
        send_otp_email(settings, email=identifier, code=code, purpose=purpose)
    except EmailDeliveryError as exc:
        logger.warning("otp delivery failed id=%s identifier=%s: %s", row.id, identifier, exc)
        return IssuedOtp(otp_id=row.id, code=code, expires_at=expires_at, delivered=False, delivery_error=str(exc))
    return IssuedOtp(otp_id=row.id, code=code, expires_at=expires_at, delivered=True)


def mark_verified(db: Session, otp_id: int) -> bool:
    """Flip ``verified`` only if nobody else did it first."""
    try:
        updated = (
            db.query(OtpCode)
            .filter(OtpCode.id == otp_id, OtpCode.verified.is_(False))
            .update({OtpCode.verified: True}, synchronize_session=False)
        )
        db.commit()
    except Exception:
        db.rollback()
        raise
    return updated == 1


def verify_otp(db: Session, identifier: str | None, code: str | None, purpose: str = OTP_PURPOSE_EMAIL) -> OtpCode:
    purpose = normalize_purpose(purpose)
    identifier = normalize_identifier(identifier, purpose)

    row = _latest(db, identifier, purpose, verified=False)
    if row is None:
        raise OtpNotFound()

    if _now_utc() >= as_utc(row.expires_at):
        raise OtpExpired()

    submitted = str(code or "").strip()
    if not secrets.compare_digest(submitted.encode(), str(row.otp_code).encode()):
        raise OtpMismatch()

    if not mark_verified(db, row.id):
        raise OtpNotFound()
    logger.info("otp verified id=%s type=%s identifier=%s", row.id, purpose, identifier)
    return row


def find_registration_otp(
    db: Session,
    settings: Settings,
    identifier: str | None,
    purpose: str = OTP_PURPOSE_EMAIL,
) -> OtpCode:
    purpose = normalize_purpose(purpose)
    identifier = normalize_identifier(identifier, purpose)

    row = _latest(db, identifier, purpose, verified=True)
    if row is None:
        raise EmailNotVerified()

    window = timedelta(minutes=int(settings.OTP_REGISTRATION_WINDOW_MINUTES))
    if _now_utc() - as_utc(row.created_at) > window:
        raise VerificationExpired()
    return row


def purge_expired_otps(db: Session, *, now: datetime, retention: timedelta) -> int:
    cutoff = now - retention
    try:
        deleted = db.query(OtpCode).filter(OtpCode.expires_at <= cutoff).delete(synchronize_session=False)
        db.commit()
    except Exception:
        db.rollback()
        raise
    return int(deleted)

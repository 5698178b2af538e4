from __future__ import annotations

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from clinic.api.common import datastore_guard
from clinic.core.config import Settings
from clinic.core.deps import get_settings
from clinic.db.session import get_db
from clinic.models.otp_code import OTP_PURPOSE_EMAIL
from clinic.schemas.public import OtpSendEmail, OtpVerify
from clinic.services.otp_service import issue_otp, verify_otp

router = APIRouter()


@router.post("/send-email")
def send_email_otp(
    payload: OtpSendEmail,
    db: Session = Depends(get_db),
    settings: Settings = Depends(get_settings),
):
    with datastore_guard(db, "Failed to send OTP"):
        issued = issue_otp(db, settings, payload.email, OTP_PURPOSE_EMAIL)

    if issued.delivered:
        return {"success": True, "message": "OTP sent to your email", "delivered": True}

    if settings.OTP_DELIVERY_DEGRADED_MODE:
        return {"success": True, "message": "OTP generated", "delivered": False, "otp": issued.code}
    return {
        "success": True,
        "message": "OTP generated, but the email could not be delivered. Please request a new one shortly.",
        "delivered": False,
    }


@router.post("/verify")
def verify_otp_code(payload: OtpVerify, db: Session = Depends(get_db)):
    with datastore_guard(db, "Failed to verify OTP"):
        verify_otp(db, payload.identifier, payload.otp, payload.type)
    return {"success": True, "message": "OTP verified successfully"}

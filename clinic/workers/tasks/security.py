from __future__ import annotations

from datetime import timedelta

from clinic.models.common import utcnow
from clinic.models.otp_code import OtpCode
from clinic.services.otp_service import purge_expired_otps
from clinic.workers.celery_app import celery_app, get_session_factory, worker_settings


@celery_app.task(name="clinic.workers.tasks.security.cleanup_expired_otps")
def cleanup_expired_otps():
    now = utcnow()
    retention = timedelta(hours=int(worker_settings.OTP_PURGE_RETENTION_HOURS))
    db = get_session_factory()()
    try:
        total = db.query(OtpCode).count()
        deleted = purge_expired_otps(db, now=now, retention=retention)
        return {"checked": int(total), "deleted": int(deleted)}
    finally:
        db.close()

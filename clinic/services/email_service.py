from __future__ import annotations

import logging
import smtplib
from email.message import EmailMessage
from typing import Any
import httpx

from clinic.core.config import Settings


class EmailDeliveryError(Exception):
    pass


logger = logging.getLogger("clinic.email")

_MOCK_PROVIDERS = {"", "dummy", "mock", "console"}


def _normalize_email(value: str | None) -> str:
    return str(value or "").strip().lower()


def build_otp_text(*, code: str, ttl_minutes: int) -> str:
    return (
        f"Your One-Time Password (OTP) for registration is: {code}\n"
        f"This OTP is valid for {ttl_minutes} minutes. Do not share it with anyone.\n"
        "If you didn't request this, please ignore this email."
    )


def build_otp_html(*, code: str, ttl_minutes: int) -> str:
    return f"""
        <div style="font-family: Arial, sans-serif; max-width: 500px; margin: 0 auto; padding: 20px; background: #0a192f; border-radius: 10px;">
            <h2 style="color: #64ffda; text-align: center;">HealthPlus Clinic</h2>
            <div style="background: rgba(255,255,255,0.1); padding: 20px; border-radius: 8px; margin: 20px 0;">
                <p style="color: #ccd6f6; font-size: 16px;">Your One-Time Password (OTP) for registration is:</p>
                <div style="background: rgba(100,255,218,0.2); padding: 15px; border-radius: 8px; text-align: center; margin: 15px 0;">
                    <span style="font-size: 32px; font-weight: bold; letter-spacing: 8px; color: #64ffda;">{code}</span>
                </div>
                <p style="color: #8892b0; font-size: 14px;">This OTP is valid for {ttl_minutes} minutes. Do not share it with anyone.</p>
            </div>
            <p style="color: #8892b0; font-size: 12px; text-align: center;">If you didn't request this, please ignore this email.</p>
        </div>
    """


def _mock_send(*, email: str, code: str, purpose: str) -> dict[str, Any]:
    logger.warning("[OTP EMAIL MOCK] purpose=%s email=%s code=%s", purpose, email, code)
    return {
        "provider": "mock_email",
        "status": "accepted",
        "sent": True,
        "mocked": True,
    }


def _send_smtp(settings: Settings, *, email: str, subject: str, text: str, html: str) -> dict[str, Any]:
    host = str(settings.SMTP_HOST or "").strip()
    port = int(settings.SMTP_PORT or 0)
    username = str(settings.SMTP_USER or "").strip()
    password = str(settings.SMTP_PASSWORD or "").strip()
    sender = str(settings.EMAIL_FROM or "").strip()
    use_tls = bool(settings.SMTP_USE_TLS)
    use_ssl = bool(settings.SMTP_USE_SSL)

    if not host or not port or not sender:
        raise EmailDeliveryError("SMTP_HOST/SMTP_PORT/EMAIL_FROM are not configured")
    if use_tls and use_ssl:
        raise EmailDeliveryError("SMTP_USE_TLS and SMTP_USE_SSL cannot both be enabled")

    msg = EmailMessage()
    msg["From"] = sender
    msg["To"] = email
    msg["Subject"] = subject
    msg.set_content(text)
    msg.add_alternative(html, subtype="html")

    try:
        if use_ssl:
            smtp = smtplib.SMTP_SSL(host=host, port=port, timeout=15)
        else:
            smtp = smtplib.SMTP(host=host, port=port, timeout=15)
        with smtp as client:
            client.ehlo()
            if use_tls:
                client.starttls()
                client.ehlo()
            if username:
                client.login(username, password)
            client.send_message(msg)
    except (smtplib.SMTPException, OSError) as exc:
        raise EmailDeliveryError(f"SMTP delivery failed: {exc}") from exc

    return {"provider": "smtp", "status": "accepted", "sent": True}


def _send_resend(settings: Settings, *, email: str, subject: str, html: str) -> dict[str, Any]:
    url = str(settings.RESEND_API_URL or "").strip()
    api_key = str(settings.RESEND_API_KEY or "").strip()
    if not url:
        raise EmailDeliveryError("RESEND_API_URL is not configured")
    if not api_key:
        raise EmailDeliveryError("RESEND_API_KEY is not configured")
    try:
        with httpx.Client(timeout=15.0) as client:
            response = client.post(
                url,
                headers={"Authorization": f"Bearer {api_key}", "Content-Type": "application/json"},
                json={"from": settings.EMAIL_FROM, "to": [email], "subject": subject, "html": html},
            )
    except httpx.HTTPError as exc:
        raise EmailDeliveryError(f"Resend request failed: {exc}") from exc
    payload: dict[str, Any] = {}
    try:
        payload = response.json() if response.content else {}
    except ValueError:
        payload = {}
    if response.status_code >= 400:
        detail = str(payload.get("message") or payload.get("error") or response.text or response.status_code)
        raise EmailDeliveryError(f"Resend error: {detail}")
    if not payload.get("id"):
        raise EmailDeliveryError("Resend accepted the request without a message id")
    return {"provider": "resend", "status": "accepted", "sent": True, "id": payload["id"]}


def send_otp_email(settings: Settings, *, email: str, code: str, purpose: str) -> dict[str, Any]:
    normalized_email = _normalize_email(email)
    if not normalized_email:
        raise EmailDeliveryError("Invalid email")

    provider = str(settings.EMAIL_PROVIDER or "dummy").strip().lower()
    if provider in _MOCK_PROVIDERS:
        return _mock_send(email=normalized_email, code=code, purpose=purpose)

    ttl = int(settings.OTP_TTL_MINUTES)
    subject = str(settings.OTP_EMAIL_SUBJECT or "").strip() or "Your verification code"
    html = build_otp_html(code=code, ttl_minutes=ttl)

    if provider == "resend":
        return _send_resend(settings, email=normalized_email, subject=subject, html=html)

    if provider == "smtp":
        text = build_otp_text(code=code, ttl_minutes=ttl)
        return _send_smtp(settings, email=normalized_email, subject=subject, text=text, html=html)

    raise EmailDeliveryError(f"Unknown EMAIL_PROVIDER: {provider}")


def email_provider_health(settings: Settings) -> dict[str, Any]:
    provider = str(settings.EMAIL_PROVIDER or "dummy").strip().lower()
    if provider in _MOCK_PROVIDERS:
        return {"provider": "dummy", "mode": "mock", "can_send": True, "issues": []}

    if provider == "resend":
        issues: list[str] = []
        if not str(settings.RESEND_API_KEY or "").strip():
            issues.append("RESEND_API_KEY is not configured")
        return {"provider": "resend", "mode": "real", "can_send": not issues, "issues": issues}

    if provider == "smtp":
        issues = []
        if not str(settings.SMTP_HOST or "").strip():
            issues.append("SMTP_HOST is not configured")
        if not str(settings.EMAIL_FROM or "").strip():
            issues.append("EMAIL_FROM is not configured")
        return {"provider": "smtp", "mode": "real", "can_send": not issues, "issues": issues}

    return {"provider": provider, "mode": "unknown", "can_send": False, "issues": [f"Unknown EMAIL_PROVIDER: {provider}"]}

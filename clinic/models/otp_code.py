from datetime import datetime

from sqlalchemy import Boolean, DateTime, Index, String
from sqlalchemy.orm import Mapped, mapped_column

from clinic.db.session import Base
from clinic.models.common import CreatedAtMixin, IntIdMixin

OTP_PURPOSE_EMAIL = "email"
OTP_PURPOSES = {OTP_PURPOSE_EMAIL}


class OtpCode(Base, IntIdMixin, CreatedAtMixin):
    __tablename__ = "otp_codes"
    __table_args__ = (Index("ix_otp_codes_identifier_type", "identifier", "type"),)

    identifier: Mapped[str] = mapped_column(String(255), nullable=False)
    otp_code: Mapped[str] = mapped_column(String(6), nullable=False)
    type: Mapped[str] = mapped_column(String(16), nullable=False)
    expires_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)
    verified: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False)

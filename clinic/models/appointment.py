from sqlalchemy import Integer, String, Text
from sqlalchemy.orm import Mapped, mapped_column

from clinic.db.session import Base
from clinic.models.common import CreatedAtMixin, IntIdMixin

APPOINTMENT_STATUSES = ("pending", "confirmed", "completed", "cancelled")


class Appointment(Base, IntIdMixin, CreatedAtMixin):
    __tablename__ = "appointments"

    patient_name: Mapped[str] = mapped_column(String(200), nullable=False)
    patient_phone: Mapped[str] = mapped_column(String(30), nullable=False)
    patient_email: Mapped[str] = mapped_column(String(255), nullable=False, index=True)
    patient_age: Mapped[int | None] = mapped_column(Integer, nullable=True)
    patient_gender: Mapped[str | None] = mapped_column(String(20), default="", nullable=True)
    department: Mapped[str] = mapped_column(String(100), nullable=False)
    doctor: Mapped[str] = mapped_column(String(200), nullable=False)
    appointment_date: Mapped[str] = mapped_column(String(20), nullable=False)
    appointment_time: Mapped[str] = mapped_column(String(20), nullable=False)
    consultation_type: Mapped[str] = mapped_column(String(50), nullable=False)
    symptoms: Mapped[str | None] = mapped_column(Text, default="", nullable=True)
    status: Mapped[str] = mapped_column(String(20), default="pending", nullable=False)

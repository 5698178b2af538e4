from sqlalchemy import Boolean, String, Text
from sqlalchemy.orm import Mapped, mapped_column

from clinic.db.session import Base
from clinic.models.common import CreatedAtMixin, IntIdMixin


class Patient(Base, IntIdMixin, CreatedAtMixin):
    __tablename__ = "patients"

    first_name: Mapped[str] = mapped_column(String(100), nullable=False)
    last_name: Mapped[str] = mapped_column(String(100), nullable=False)
    email: Mapped[str] = mapped_column(String(255), nullable=False, unique=True, index=True)
    phone: Mapped[str] = mapped_column(String(30), nullable=False, unique=True)
    password: Mapped[str] = mapped_column(String(255), nullable=False)
    dob: Mapped[str] = mapped_column(String(20), default="", nullable=True)
    gender: Mapped[str] = mapped_column(String(20), default="", nullable=True)
    address: Mapped[str] = mapped_column(Text, default="", nullable=True)
    email_verified: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False)
    phone_verified: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False)

    @property
    def full_name(self) -> str:
        return f"{self.first_name} {self.last_name}".strip()

from sqlalchemy import String
from sqlalchemy.orm import Mapped, mapped_column

from clinic.db.session import Base
from clinic.models.common import CreatedAtMixin, IntIdMixin


class Doctor(Base, IntIdMixin, CreatedAtMixin):
    __tablename__ = "doctors"

    name: Mapped[str] = mapped_column(String(200), nullable=False)
    email: Mapped[str] = mapped_column(String(255), nullable=False, unique=True, index=True)
    password: Mapped[str] = mapped_column(String(255), nullable=False)
    department: Mapped[str] = mapped_column(String(100), nullable=False)
    phone: Mapped[str | None] = mapped_column(String(30), default="", nullable=True)

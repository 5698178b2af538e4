from sqlalchemy import String, Text
from sqlalchemy.orm import Mapped, mapped_column

from clinic.db.session import Base
from clinic.models.common import CreatedAtMixin, IntIdMixin


class Contact(Base, IntIdMixin, CreatedAtMixin):
    __tablename__ = "contacts"

    name: Mapped[str] = mapped_column(String(200), nullable=False)
    phone: Mapped[str] = mapped_column(String(30), nullable=False)
    email: Mapped[str] = mapped_column(String(255), nullable=False)
    subject: Mapped[str] = mapped_column(String(255), nullable=False)
    message: Mapped[str] = mapped_column(Text, nullable=False)

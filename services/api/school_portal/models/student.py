"""Student model.

Represents an admitted student. Students sign in to the portal with
reg_number + pin.
"""

from datetime import datetime

from sqlalchemy import DateTime, String, Text
from sqlalchemy.orm import Mapped, mapped_column

from school_portal.models.ids import generate_record_id, utcnow
from school_portal.stores.postgres import Base


class Student(Base):
    """Admitted student."""

    __tablename__ = "students"

    id: Mapped[str] = mapped_column(String(64), primary_key=True, default=generate_record_id)

    # Identity
    full_name: Mapped[str] = mapped_column(String(200))
    reg_number: Mapped[str] = mapped_column(String(50), unique=True, index=True)
    pin: Mapped[str] = mapped_column(String(20))
    class_level: Mapped[str] = mapped_column(String(50), index=True)

    # Contact
    guardian_phone: Mapped[str] = mapped_column(String(50), default="")
    email: Mapped[str | None] = mapped_column(String(200))
    address: Mapped[str | None] = mapped_column(Text)
    date_of_birth: Mapped[str | None] = mapped_column(String(20))

    # Status
    fees_paid: Mapped[bool] = mapped_column(default=False)
    status: Mapped[str | None] = mapped_column(String(50))
    application_date: Mapped[str | None] = mapped_column(String(40))
    photo_url: Mapped[str | None] = mapped_column(Text)

    # Timestamps
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=utcnow)
    updated_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=utcnow)

    def __repr__(self) -> str:
        return f"<Student {self.reg_number} ({self.class_level})>"

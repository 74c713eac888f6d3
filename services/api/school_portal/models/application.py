"""Admission application model.

One application per applicant account (user_id). Created when the applicant
returns from the payment gateway or submits the form, transitioned by an admin.
"""

from datetime import datetime

from sqlalchemy import DateTime, String, Text
from sqlalchemy.orm import Mapped, mapped_column

from school_portal.models.ids import generate_record_id, utcnow
from school_portal.stores.postgres import Base


class Application(Base):
    """Admission application."""

    __tablename__ = "applications"

    id: Mapped[str] = mapped_column(String(64), primary_key=True, default=generate_record_id)
    user_id: Mapped[str] = mapped_column(String(100), unique=True, index=True)

    # Applicant
    full_name: Mapped[str | None] = mapped_column(String(200))
    gender: Mapped[str | None] = mapped_column(String(20))
    date_of_birth: Mapped[str | None] = mapped_column(String(20))
    special_needs: Mapped[str | None] = mapped_column(Text)
    class_applied: Mapped[str | None] = mapped_column(String(50))

    # Academic history
    last_school: Mapped[str | None] = mapped_column(String(200))
    islamiyya_school: Mapped[str | None] = mapped_column(String(200))
    graduation_year: Mapped[str | None] = mapped_column(String(10))

    # Guardian / contact
    parent_name: Mapped[str | None] = mapped_column(String(200))
    parent_occupation: Mapped[str | None] = mapped_column(String(200))
    phone: Mapped[str | None] = mapped_column(String(50))
    email: Mapped[str | None] = mapped_column(String(200))
    address: Mapped[str | None] = mapped_column(Text)

    # Payment + workflow
    payment_reference: Mapped[str | None] = mapped_column(String(100), index=True)
    status: Mapped[str] = mapped_column(String(20), default="Pending", index=True)
    photo_url: Mapped[str | None] = mapped_column(Text)

    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=utcnow)
    updated_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=utcnow)

    def __repr__(self) -> str:
        return f"<Application {self.user_id} ({self.status})>"

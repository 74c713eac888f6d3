"""Class (form level) model."""

from datetime import datetime

from sqlalchemy import DateTime, String
from sqlalchemy.orm import Mapped, mapped_column

from school_portal.models.ids import generate_record_id, utcnow
from school_portal.stores.postgres import Base


class SchoolClass(Base):
    """A class level such as "JSS 1"."""

    __tablename__ = "classes"

    id: Mapped[str] = mapped_column(String(64), primary_key=True, default=generate_record_id)
    name: Mapped[str] = mapped_column(String(50), unique=True)

    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=utcnow)
    updated_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=utcnow)

    def __repr__(self) -> str:
        return f"<SchoolClass {self.name}>"

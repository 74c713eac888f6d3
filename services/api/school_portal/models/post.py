"""News post model (public notice board)."""

from datetime import datetime

from sqlalchemy import DateTime, String, Text
from sqlalchemy.orm import Mapped, mapped_column

from school_portal.models.ids import generate_record_id, utcnow
from school_portal.stores.postgres import Base


class Post(Base):
    """News post shown on the public pages."""

    __tablename__ = "posts"

    id: Mapped[str] = mapped_column(String(64), primary_key=True, default=generate_record_id)
    title: Mapped[str] = mapped_column(String(300))
    content: Mapped[str] = mapped_column(Text)
    date: Mapped[str] = mapped_column(String(20))

    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=utcnow)
    updated_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=utcnow)

    def __repr__(self) -> str:
        return f"<Post {self.title!r}>"

"""Term result model.

One row per (student, class, term, session). Per-subject scores live in a
JSON array; position and class_population are written by the ranking pass.
"""

from datetime import datetime

from sqlalchemy import JSON, DateTime, Float, Index, Integer, String, Text
from sqlalchemy.orm import Mapped, mapped_column

from school_portal.models.ids import generate_record_id, utcnow
from school_portal.stores.postgres import Base


class TermResult(Base):
    """A student's result sheet for one term."""

    __tablename__ = "results"
    __table_args__ = (
        Index("ix_results_class_term_session", "class_level", "term", "session"),
    )

    id: Mapped[str] = mapped_column(String(64), primary_key=True, default=generate_record_id)

    # Student reference (denormalised for report cards)
    student_id: Mapped[str] = mapped_column(String(64), index=True)
    student_name: Mapped[str | None] = mapped_column(String(200))
    reg_number: Mapped[str | None] = mapped_column(String(50))

    # Ranking key
    class_level: Mapped[str] = mapped_column(String(50))
    term: Mapped[str] = mapped_column(String(20))
    session: Mapped[str] = mapped_column(String(20))

    # Scores: [{subject, ca, exam, total, grade, remark}, ...]
    scores: Mapped[list[dict]] = mapped_column(JSON, default=list)
    total_score: Mapped[float] = mapped_column(Float, default=0)
    average: Mapped[float] = mapped_column(Float, default=0)

    # Written by ranking
    position: Mapped[str | None] = mapped_column(String(10))
    class_population: Mapped[int | None] = mapped_column(Integer)

    # Remarks
    teacher_comment: Mapped[str | None] = mapped_column(Text)
    principal_comment: Mapped[str | None] = mapped_column(Text)
    next_term_begins: Mapped[str | None] = mapped_column(String(20))

    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=utcnow)
    updated_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=utcnow)

    def __repr__(self) -> str:
        return f"<TermResult {self.reg_number} {self.term} {self.session} total={self.total_score}>"

"""Contest model."""
import uuid
from sqlalchemy import Column, String, DateTime, CheckConstraint
from sqlalchemy.orm import relationship
from contestvote.database import Base
from contestvote.models.base import get_uuid_column, utc_now

NAME_MAX_LENGTH = 200


class Contest(Base):
    """A time-boxed voting event containing participants."""
    __tablename__ = "contests"

    contest_id = get_uuid_column(primary_key=True, default=uuid.uuid4)
    name = Column(String(NAME_MAX_LENGTH), nullable=False)
    start_date = Column(DateTime(timezone=True), nullable=False)
    end_date = Column(DateTime(timezone=True), nullable=False)
    created_at = Column(DateTime(timezone=True), default=utc_now, nullable=False, index=True)
    updated_at = Column(DateTime(timezone=True), default=utc_now, onupdate=utc_now, nullable=False)

    # Rows are removed with bulk deletes inside ContestService.delete
    participants = relationship(
        "Participant",
        back_populates="contest",
        passive_deletes=True,
    )

    __table_args__ = (
        CheckConstraint("start_date < end_date", name="ck_contests_date_range"),
    )

    def __repr__(self):
        return f"<Contest(contest_id={self.contest_id}, name={self.name!r})>"

"""Participant model."""
import uuid
from sqlalchemy import Column, String, Text, Boolean, DateTime, ForeignKey, UniqueConstraint, Index
from sqlalchemy.orm import relationship
from contestvote.database import Base
from contestvote.models.base import get_uuid_column, utc_now

FULL_NAME_MAX_LENGTH = 200
EMAIL_MAX_LENGTH = 255
PHOTO_URL_MAX_LENGTH = 500


class Participant(Base):
    """An entrant in a contest, identified by a short code name."""
    __tablename__ = "participants"

    participant_id = get_uuid_column(primary_key=True, default=uuid.uuid4)
    code_name = Column(String(20), nullable=False)
    full_name = Column(String(FULL_NAME_MAX_LENGTH), nullable=False)
    email = Column(String(EMAIL_MAX_LENGTH), nullable=False)
    about = Column(Text, nullable=False)
    photo = Column(String(PHOTO_URL_MAX_LENGTH), nullable=True)
    contest_id = get_uuid_column(
        ForeignKey("contests.contest_id", ondelete="CASCADE"),
        nullable=False,
    )
    evicted = Column(Boolean, default=False, nullable=False)
    created_at = Column(DateTime(timezone=True), default=utc_now, nullable=False)
    updated_at = Column(DateTime(timezone=True), default=utc_now, onupdate=utc_now, nullable=False)

    contest = relationship("Contest", back_populates="participants")
    votes = relationship(
        "Vote",
        back_populates="participant",
        passive_deletes=True,
    )

    __table_args__ = (
        UniqueConstraint("code_name", name="uq_participants_code_name"),
        UniqueConstraint("email", name="uq_participants_email"),
        Index("ix_participants_contest_created", "contest_id", "created_at"),
    )

    def __repr__(self):
        return (f"<Participant(code_name={self.code_name}, contest_id={self.contest_id}, "
                f"evicted={self.evicted})>")

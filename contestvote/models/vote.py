"""Vote model."""
import uuid
from sqlalchemy import Column, String, Integer, DateTime, ForeignKey, UniqueConstraint, CheckConstraint
from sqlalchemy.orm import relationship
from contestvote.database import Base
from contestvote.models.base import get_uuid_column, utc_now

VOTER_NAME_MAX_LENGTH = 200
PAYMENT_REFERENCE_MAX_LENGTH = 255


class Vote(Base):
    """A quantity of ballots cast for a participant."""
    __tablename__ = "votes"

    vote_id = get_uuid_column(primary_key=True, default=uuid.uuid4)
    contest_id = get_uuid_column(
        ForeignKey("contests.contest_id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    participant_id = get_uuid_column(
        ForeignKey("participants.participant_id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    vote_count = Column(Integer, nullable=False)
    voter_name = Column(String(VOTER_NAME_MAX_LENGTH), nullable=False)
    # Unique when present; NULL references never collide
    payment_reference = Column(String(PAYMENT_REFERENCE_MAX_LENGTH), nullable=True)
    created_at = Column(DateTime(timezone=True), default=utc_now, nullable=False)

    participant = relationship("Participant", back_populates="votes")

    __table_args__ = (
        UniqueConstraint("payment_reference", name="uq_votes_payment_reference"),
        CheckConstraint("vote_count >= 1", name="ck_votes_vote_count_positive"),
    )

    def __repr__(self):
        return (f"<Vote(vote_id={self.vote_id}, participant_id={self.participant_id}, "
                f"vote_count={self.vote_count})>")

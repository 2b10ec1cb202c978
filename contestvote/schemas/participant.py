"""Participant-related Pydantic schemas."""
from datetime import datetime
from uuid import UUID

from contestvote.schemas.base import BaseSchema
from contestvote.schemas.vote import VoteResponse


class ParticipantResponse(BaseSchema):
    """Participant details."""
    participant_id: UUID
    code_name: str
    full_name: str
    email: str
    about: str
    photo: str | None
    contest_id: UUID
    evicted: bool
    created_at: datetime
    updated_at: datetime


class ParticipantDetailResponse(ParticipantResponse):
    """Participant with the votes cast for them."""
    total_votes: int
    votes: list[VoteResponse]

"""Vote-related Pydantic schemas."""
from datetime import datetime
from uuid import UUID

from pydantic import EmailStr, Field

from contestvote.schemas.base import BaseSchema


class VoteCreate(BaseSchema):
    """Vote backed by a payment reference supplied by the caller."""
    participant_code_name: str = Field(..., min_length=1)
    vote_count: int
    voter_name: str = Field(..., min_length=1)
    email: EmailStr | None = None
    payment_reference: str | None = None


class AdminVoteCreate(BaseSchema):
    """Admin-issued votes; the payment reference is generated server-side."""
    vote_count: int
    voter_name: str | None = None


class PaymentInitiateRequest(BaseSchema):
    """Request to start a checkout for a vote bundle."""
    participant_code_name: str = Field(..., min_length=1)
    vote_count: int
    email: EmailStr
    voter_name: str = Field(..., min_length=1)


class PaymentInitiateResponse(BaseSchema):
    """Checkout details for the voter."""
    authorization_url: str
    access_code: str
    reference: str


class VoteResponse(BaseSchema):
    """Vote details."""
    vote_id: UUID
    contest_id: UUID
    participant_id: UUID
    vote_count: int
    voter_name: str
    payment_reference: str | None
    created_at: datetime

"""Contest-related Pydantic schemas."""
from datetime import datetime
from uuid import UUID

from pydantic import Field

from contestvote.schemas.base import BaseSchema


class ContestCreate(BaseSchema):
    """Request to create a contest."""
    name: str = Field(..., min_length=1, max_length=200)
    start_date: datetime
    end_date: datetime


class ContestUpdate(BaseSchema):
    """Partial contest update; omitted fields are left unchanged."""
    name: str | None = Field(None, min_length=1, max_length=200)
    start_date: datetime | None = None
    end_date: datetime | None = None


class ContestResponse(BaseSchema):
    """Contest details."""
    contest_id: UUID
    name: str
    start_date: datetime
    end_date: datetime
    created_at: datetime
    updated_at: datetime


class ContestResult(BaseSchema):
    """Vote total for one participant."""
    code_name: str
    name: str
    total_votes: int
    evicted: bool

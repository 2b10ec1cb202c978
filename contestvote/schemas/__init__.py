from contestvote.schemas.contest import ContestCreate, ContestUpdate, ContestResponse, ContestResult
from contestvote.schemas.participant import ParticipantResponse, ParticipantDetailResponse
from contestvote.schemas.vote import (
    AdminVoteCreate,
    PaymentInitiateRequest,
    PaymentInitiateResponse,
    VoteCreate,
    VoteResponse,
)
from contestvote.schemas.media import ImageDeleteRequest, ImageDeleteResponse

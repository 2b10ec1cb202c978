"""Vote API router: caller-referenced, admin and gateway-verified votes."""
import logging

from fastapi import APIRouter, Depends, Query

from contestvote.dependencies import get_contest_service, get_participant_service, get_vote_service
from contestvote.schemas.vote import (
    AdminVoteCreate,
    PaymentInitiateRequest,
    PaymentInitiateResponse,
    VoteCreate,
    VoteResponse,
)
from contestvote.services.contest_service import ContestService
from contestvote.services.participant_service import ParticipantService
from contestvote.services.payment_service import PaymentService, get_payment_service
from contestvote.services.vote_service import VoteService
from contestvote.utils.exceptions import NotFoundError, ValidationError
from contestvote.utils.identifiers import parse_identifier

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/contests", tags=["votes"])


@router.post("/{contest_id}/votes", response_model=VoteResponse, status_code=201)
async def save_vote(
        contest_id: str,
        vote_request: VoteCreate,
        vote_service: VoteService = Depends(get_vote_service),
):
    """Record a vote under a payment reference supplied by the caller."""
    return await vote_service.record_vote(
        contest_id,
        vote_request.participant_code_name,
        vote_request.vote_count,
        vote_request.voter_name,
        payment_reference=vote_request.payment_reference,
    )


@router.post(
    "/{contest_id}/participants/{code_name}/votes",
    response_model=VoteResponse,
    status_code=201,
)
async def add_admin_votes(
        contest_id: str,
        code_name: str,
        vote_request: AdminVoteCreate,
        vote_service: VoteService = Depends(get_vote_service),
):
    """Add votes on behalf of an administrator."""
    return await vote_service.add_admin_vote(
        contest_id,
        code_name,
        vote_request.vote_count,
        voter_name=vote_request.voter_name,
    )


@router.post("/{contest_id}/votes/initiate", response_model=PaymentInitiateResponse)
async def initiate_vote_payment(
        contest_id: str,
        payment_request: PaymentInitiateRequest,
        contest_service: ContestService = Depends(get_contest_service),
        participant_service: ParticipantService = Depends(get_participant_service),
        payment_service: PaymentService = Depends(get_payment_service),
):
    """Start a gateway checkout for a vote bundle."""
    contest = await contest_service.require_contest(contest_id)
    participant = await participant_service.get_by_code_name(payment_request.participant_code_name)
    if not participant:
        raise NotFoundError("Participant not found")

    initiation = await payment_service.initiate(
        contest,
        participant,
        payment_request.vote_count,
        str(payment_request.email),
        payment_request.voter_name,
    )
    return PaymentInitiateResponse(
        authorization_url=initiation.authorization_url,
        access_code=initiation.access_code,
        reference=initiation.reference,
    )


@router.get("/verify-vote/{contest_id}", response_model=VoteResponse)
async def verify_vote_payment(
        contest_id: str,
        reference: str = Query(..., min_length=1),
        vote_service: VoteService = Depends(get_vote_service),
        payment_service: PaymentService = Depends(get_payment_service),
):
    """Gateway callback: verify the transaction, then record its vote once."""
    payment = await payment_service.verify(reference)
    if parse_identifier(payment.contest_id, "contestId") != parse_identifier(contest_id, "contestId"):
        logger.warning(
            f"Payment {payment.reference} belongs to contest {payment.contest_id}, not {contest_id}"
        )
        raise ValidationError("Payment does not belong to this contest")

    return await vote_service.record_vote(
        contest_id,
        payment.participant_code_name,
        payment.vote_count,
        payment.voter_name,
        payment_reference=payment.reference,
    )

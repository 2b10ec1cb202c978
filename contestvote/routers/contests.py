"""Contest API router."""
import logging

from fastapi import APIRouter, Depends, Response

from contestvote.dependencies import get_contest_service, get_vote_service
from contestvote.schemas.contest import ContestCreate, ContestUpdate, ContestResponse, ContestResult
from contestvote.services.contest_service import ContestService
from contestvote.services.vote_service import VoteService

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/contests", tags=["contests"])


@router.get("", response_model=list[ContestResponse])
async def list_contests(contest_service: ContestService = Depends(get_contest_service)):
    """List all contests, newest first."""
    return await contest_service.list_contests()


@router.post("", response_model=ContestResponse, status_code=201)
async def create_contest(
        contest_request: ContestCreate,
        contest_service: ContestService = Depends(get_contest_service),
):
    """Create a contest."""
    return await contest_service.create_contest(
        name=contest_request.name,
        start_date=contest_request.start_date,
        end_date=contest_request.end_date,
    )


@router.get("/{contest_id}", response_model=ContestResponse)
async def get_contest(
        contest_id: str,
        contest_service: ContestService = Depends(get_contest_service),
):
    """Get a single contest."""
    return await contest_service.require_contest(contest_id)


@router.put("/{contest_id}", response_model=ContestResponse)
async def update_contest(
        contest_id: str,
        contest_request: ContestUpdate,
        contest_service: ContestService = Depends(get_contest_service),
):
    """Update a contest; omitted fields keep their values."""
    return await contest_service.update_contest(
        contest_id,
        name=contest_request.name,
        start_date=contest_request.start_date,
        end_date=contest_request.end_date,
    )


@router.delete("/{contest_id}", status_code=204)
async def delete_contest(
        contest_id: str,
        contest_service: ContestService = Depends(get_contest_service),
):
    """Delete a contest with all of its participants and votes."""
    await contest_service.delete_contest(contest_id)
    return Response(status_code=204)


@router.get("/{contest_id}/results", response_model=list[ContestResult])
async def get_results(
        contest_id: str,
        vote_service: VoteService = Depends(get_vote_service),
):
    """Vote totals for every participant of a contest."""
    return await vote_service.results(contest_id)

"""Participant API router.

Create and update take multipart form data so a photo can be uploaded in the
same request; the photo goes to the media host before the database write.
"""
import logging

from fastapi import APIRouter, Depends, File, Form, Response, UploadFile

from contestvote.dependencies import get_contest_service, get_participant_service, get_vote_service
from contestvote.schemas.participant import ParticipantDetailResponse, ParticipantResponse
from contestvote.schemas.vote import VoteResponse
from contestvote.services.contest_service import ContestService
from contestvote.services.media_service import MediaAsset, MediaService, get_media_service
from contestvote.services.participant_service import ParticipantService
from contestvote.services.vote_service import VoteService
from contestvote.utils.exceptions import NotFoundError

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/contests", tags=["participants"])


async def _upload_photo(media_service: MediaService, photo: UploadFile | None) -> MediaAsset | None:
    """Upload the submitted photo, if any."""
    if photo is None or not photo.filename:
        return None
    content = await photo.read()
    if not content:
        return None
    return await media_service.upload(photo.filename, content, photo.content_type)


@router.get("/{contest_id}/participants", response_model=list[ParticipantResponse])
async def list_participants(
        contest_id: str,
        participant_service: ParticipantService = Depends(get_participant_service),
):
    """List participants: active first, then evicted, each newest first."""
    return await participant_service.list_by_contest(contest_id)


@router.get("/{contest_id}/participants/{code_name}", response_model=ParticipantDetailResponse)
async def get_participant(
        contest_id: str,
        code_name: str,
        contest_service: ContestService = Depends(get_contest_service),
        participant_service: ParticipantService = Depends(get_participant_service),
        vote_service: VoteService = Depends(get_vote_service),
):
    """Participant details with the votes cast for them."""
    await contest_service.require_contest(contest_id)
    participant = await participant_service.get_by_contest_and_code_name(contest_id, code_name)
    if not participant:
        raise NotFoundError("Participant not found")

    votes = await vote_service.list_votes(contest_id, code_name)
    return ParticipantDetailResponse(
        **dict(ParticipantResponse.model_validate(participant)),
        total_votes=sum(vote.vote_count for vote in votes),
        votes=[VoteResponse.model_validate(vote) for vote in votes],
    )


@router.post("/{contest_id}/participants", response_model=ParticipantResponse, status_code=201)
async def create_participant(
        contest_id: str,
        full_name: str = Form(..., alias="fullName"),
        email: str = Form(...),
        about: str = Form(...),
        photo: UploadFile | None = File(None),
        participant_service: ParticipantService = Depends(get_participant_service),
        media_service: MediaService = Depends(get_media_service),
):
    """Register a participant; the code name is assigned by the server."""
    asset = await _upload_photo(media_service, photo)
    try:
        return await participant_service.create_participant(
            contest_id,
            full_name=full_name,
            email=email,
            about=about,
            photo=asset.url if asset else None,
        )
    except Exception:
        if asset:
            await media_service.delete(asset.public_id)
        raise


@router.put("/participants/{code_name}", response_model=ParticipantResponse)
async def update_participant(
        code_name: str,
        full_name: str | None = Form(None, alias="fullName"),
        email: str | None = Form(None),
        about: str | None = Form(None),
        photo: UploadFile | None = File(None),
        participant_service: ParticipantService = Depends(get_participant_service),
        media_service: MediaService = Depends(get_media_service),
):
    """Update a participant; a new photo replaces (and deletes) the old one."""
    await participant_service.require_participant(code_name)

    asset = await _upload_photo(media_service, photo)
    try:
        return await participant_service.update_participant(
            code_name,
            full_name=full_name or None,
            email=email or None,
            about=about or None,
            photo=asset.url if asset else None,
        )
    except Exception:
        if asset:
            await media_service.delete(asset.public_id)
        raise


@router.delete("/participants/{code_name}", status_code=204)
async def delete_participant(
        code_name: str,
        participant_service: ParticipantService = Depends(get_participant_service),
):
    """Delete a participant with their votes and photo."""
    await participant_service.delete_participant(code_name)
    return Response(status_code=204)


@router.patch("/participants/evict/{code_name}", response_model=ParticipantResponse)
async def evict_participant(
        code_name: str,
        participant_service: ParticipantService = Depends(get_participant_service),
):
    """Evict a participant; they stop receiving votes."""
    return await participant_service.evict_participant(code_name)

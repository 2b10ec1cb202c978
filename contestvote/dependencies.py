"""FastAPI dependencies."""
from fastapi import Depends
from sqlalchemy.ext.asyncio import AsyncSession

from contestvote.database import get_db
from contestvote.services.contest_service import ContestService
from contestvote.services.media_service import MediaService, get_media_service
from contestvote.services.participant_service import ParticipantService
from contestvote.services.vote_service import VoteService


def get_contest_service(
        db: AsyncSession = Depends(get_db),
        media_service: MediaService = Depends(get_media_service),
) -> ContestService:
    return ContestService(db, media_service)


def get_participant_service(
        db: AsyncSession = Depends(get_db),
        media_service: MediaService = Depends(get_media_service),
) -> ParticipantService:
    return ParticipantService(db, media_service)


def get_vote_service(db: AsyncSession = Depends(get_db)) -> VoteService:
    return VoteService(db)

"""Contest registry: create, read, update and cascade-delete contests."""
import logging
from datetime import datetime
from uuid import UUID

from sqlalchemy import select, delete
from sqlalchemy.ext.asyncio import AsyncSession

from contestvote.models import Contest, Participant, Vote
from contestvote.models.contest import NAME_MAX_LENGTH
from contestvote.services.media_service import MediaService, get_media_service
from contestvote.services.store import commit_or_conflict
from contestvote.utils.datetime_helpers import validate_date_range
from contestvote.utils.exceptions import NotFoundError
from contestvote.utils.identifiers import parse_identifier, require_text

logger = logging.getLogger(__name__)


class ContestService:
    """Service for managing contests."""

    def __init__(self, db: AsyncSession, media_service: MediaService | None = None):
        self.db = db
        self.media_service = media_service or get_media_service()

    async def create_contest(self, name: str, start_date: datetime, end_date: datetime) -> Contest:
        """
        Create a new contest.

        Args:
            name: Contest name
            start_date: Voting window start
            end_date: Voting window end, strictly after start_date

        Returns:
            Created Contest

        Raises:
            ValidationError: If a field is missing or the date range is empty
        """
        name = require_text(name, "name", NAME_MAX_LENGTH)
        start_date, end_date = validate_date_range(start_date, end_date)

        contest = Contest(name=name, start_date=start_date, end_date=end_date)
        self.db.add(contest)
        await commit_or_conflict(self.db)
        await self.db.refresh(contest)

        logger.info(f"Contest created: contest_id={contest.contest_id}, name={contest.name!r}")
        return contest

    async def get_contest(self, contest_id: str | UUID) -> Contest | None:
        """Get contest by ID, or None if it does not exist."""
        contest_id = parse_identifier(contest_id, "contestId")
        result = await self.db.execute(select(Contest).where(Contest.contest_id == contest_id))
        return result.scalar_one_or_none()

    async def require_contest(self, contest_id: str | UUID) -> Contest:
        """Get contest by ID, raising NotFoundError if it does not exist."""
        contest = await self.get_contest(contest_id)
        if not contest:
            raise NotFoundError("Contest not found")
        return contest

    async def list_contests(self) -> list[Contest]:
        """List all contests, newest first."""
        result = await self.db.execute(
            select(Contest).order_by(Contest.created_at.desc())
        )
        return list(result.scalars().all())

    async def update_contest(
        self,
        contest_id: str | UUID,
        name: str | None = None,
        start_date: datetime | None = None,
        end_date: datetime | None = None,
    ) -> Contest:
        """
        Update contest fields in place; None leaves a field unchanged.

        The date range is validated against the merged result, so a single
        supplied date cannot invert the stored range.
        """
        contest = await self.require_contest(contest_id)

        if name is not None:
            name = require_text(name, "name", NAME_MAX_LENGTH)

        new_start, new_end = validate_date_range(
            start_date if start_date is not None else contest.start_date,
            end_date if end_date is not None else contest.end_date,
        )

        if name is not None:
            contest.name = name
        contest.start_date = new_start
        contest.end_date = new_end

        await commit_or_conflict(self.db)
        await self.db.refresh(contest)

        logger.info(f"Contest updated: contest_id={contest.contest_id}")
        return contest

    async def delete_contest(self, contest_id: str | UUID) -> None:
        """
        Delete a contest together with all of its participants and votes.

        Database rows go in one transaction; participant photos are removed
        afterwards on a best-effort basis.
        """
        contest = await self.require_contest(contest_id)
        contest_id = contest.contest_id

        photo_result = await self.db.execute(
            select(Participant.photo).where(
                Participant.contest_id == contest_id,
                Participant.photo.is_not(None),
            )
        )
        photos = list(photo_result.scalars().all())

        participant_ids = select(Participant.participant_id).where(Participant.contest_id == contest_id)
        statements = (
            delete(Vote).where(
                (Vote.contest_id == contest_id) | Vote.participant_id.in_(participant_ids)
            ),
            delete(Participant).where(Participant.contest_id == contest_id),
            delete(Contest).where(Contest.contest_id == contest_id),
        )
        try:
            for statement in statements:
                await self.db.execute(statement.execution_options(synchronize_session=False))
            await self.db.commit()
        except Exception:
            await self.db.rollback()
            raise

        logger.info(f"Contest deleted: contest_id={contest_id}, photos_to_cleanup={len(photos)}")

        if photos:
            deleted = await self.media_service.delete_many_by_url(photos)
            if deleted < len(photos):
                logger.warning(
                    f"Removed {deleted}/{len(photos)} photos for deleted contest {contest_id}"
                )

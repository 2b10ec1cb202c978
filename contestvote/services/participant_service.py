"""Participant registry: code name assignment, updates, eviction and deletion."""
import logging
from uuid import UUID

from sqlalchemy import select, delete, exists, update, func
from sqlalchemy.ext.asyncio import AsyncSession

from contestvote.config import get_settings
from contestvote.models import Contest, Participant, Vote
from contestvote.models.participant import EMAIL_MAX_LENGTH, FULL_NAME_MAX_LENGTH, PHOTO_URL_MAX_LENGTH
from contestvote.services.media_service import MediaService, get_media_service
from contestvote.services.store import commit_or_conflict
from contestvote.utils.exceptions import ConflictError, NotFoundError
from contestvote.utils.identifiers import check_length, parse_identifier, require_code_name, require_text

logger = logging.getLogger(__name__)


def normalize_email(email: str | None) -> str:
    return require_text(email, "email", EMAIL_MAX_LENGTH).lower()


class ParticipantService:
    """Service for managing contest participants."""

    def __init__(self, db: AsyncSession, media_service: MediaService | None = None):
        self.db = db
        self.media_service = media_service or get_media_service()
        self.settings = get_settings()

    def format_code_name(self, sequence: int) -> str:
        """Format a sequence number as a code name, e.g. 7 -> CW007."""
        return f"{self.settings.code_name_prefix}{sequence:0{self.settings.code_name_digits}d}"

    def parse_code_name(self, code_name: str | None) -> int | None:
        """Return the numeric suffix of a code name, or None if it has another shape."""
        prefix = self.settings.code_name_prefix
        if not code_name or not code_name.startswith(prefix):
            return None
        suffix = code_name[len(prefix):]
        if not suffix.isdigit():
            return None
        return int(suffix)

    async def _next_code_name(self, contest_id: UUID) -> str:
        """
        Compute the code name for the next participant of a contest.

        The sequence continues from the most recently created participant of
        the same contest. Code names are unique across all contests, so numbers
        already held by participants of other contests are skipped.
        """
        result = await self.db.execute(
            select(Participant.code_name)
            .where(Participant.contest_id == contest_id)
            .order_by(Participant.created_at.desc(), Participant.code_name.desc())
            .limit(1)
        )
        last_code_name = result.scalar_one_or_none()

        last_sequence = self.parse_code_name(last_code_name)
        sequence = last_sequence + 1 if last_sequence is not None else 1

        while await self._code_name_taken(self.format_code_name(sequence)):
            sequence += 1

        return self.format_code_name(sequence)

    async def _code_name_taken(self, code_name: str) -> bool:
        result = await self.db.execute(select(exists().where(Participant.code_name == code_name)))
        return bool(result.scalar())

    async def _require_contest(self, contest_id: UUID) -> None:
        result = await self.db.execute(select(Contest.contest_id).where(Contest.contest_id == contest_id))
        if result.scalar_one_or_none() is None:
            raise NotFoundError("Contest not found")

    async def _email_in_use(self, email: str, exclude_participant_id: UUID | None = None) -> bool:
        query = select(func.count()).select_from(Participant).where(Participant.email == email)
        if exclude_participant_id is not None:
            query = query.where(Participant.participant_id != exclude_participant_id)
        result = await self.db.execute(query)
        return result.scalar_one() > 0

    async def create_participant(
        self,
        contest_id: str | UUID,
        full_name: str,
        email: str,
        about: str,
        photo: str | None = None,
    ) -> Participant:
        """
        Create a participant with the next code name of the contest.

        Args:
            contest_id: Owning contest
            full_name: Participant name
            email: Contact email, unique across all participants
            about: Free text biography
            photo: Optional URL of an already uploaded photo

        Returns:
            Created Participant

        Raises:
            ValidationError: If the contest id or a required field is invalid
            NotFoundError: If the contest does not exist
            ConflictError: If the email or generated code name is already taken
        """
        contest_id = parse_identifier(contest_id, "contestId")
        full_name = require_text(full_name, "fullName", FULL_NAME_MAX_LENGTH)
        email = normalize_email(email)
        about = require_text(about, "about")
        photo = check_length(photo or None, "photo", PHOTO_URL_MAX_LENGTH)

        await self._require_contest(contest_id)

        if await self._email_in_use(email):
            raise ConflictError("Email already exists")

        code_name = await self._next_code_name(contest_id)
        participant = Participant(
            code_name=code_name,
            contest_id=contest_id,
            full_name=full_name,
            email=email,
            about=about,
            photo=photo or None,
        )
        self.db.add(participant)
        # A concurrent create may have claimed the same code name; the unique index decides
        await commit_or_conflict(self.db)
        await self.db.refresh(participant)

        logger.info(f"Participant created: code_name={code_name}, contest_id={contest_id}")
        return participant

    async def get_by_code_name(self, code_name: str) -> Participant | None:
        """Get participant by code name."""
        code_name = require_code_name(code_name)
        result = await self.db.execute(select(Participant).where(Participant.code_name == code_name))
        return result.scalar_one_or_none()

    async def get_by_contest_and_code_name(self, contest_id: str | UUID, code_name: str) -> Participant | None:
        """Get participant by code name, only if it belongs to the given contest."""
        contest_id = parse_identifier(contest_id, "contestId")
        code_name = require_code_name(code_name)
        result = await self.db.execute(
            select(Participant).where(
                Participant.contest_id == contest_id,
                Participant.code_name == code_name,
            )
        )
        return result.scalar_one_or_none()

    async def require_participant(self, code_name: str) -> Participant:
        participant = await self.get_by_code_name(code_name)
        if not participant:
            raise NotFoundError("Participant not found")
        return participant

    async def list_by_contest(self, contest_id: str | UUID) -> list[Participant]:
        """List participants of a contest: active before evicted, each newest first."""
        contest_id = parse_identifier(contest_id, "contestId")
        await self._require_contest(contest_id)

        result = await self.db.execute(
            select(Participant)
            .where(Participant.contest_id == contest_id)
            .order_by(
                Participant.evicted.asc(),
                Participant.created_at.desc(),
                Participant.code_name.desc(),
            )
        )
        return list(result.scalars().all())

    async def update_participant(
        self,
        code_name: str,
        full_name: str | None = None,
        email: str | None = None,
        about: str | None = None,
        photo: str | None = None,
    ) -> Participant:
        """
        Update participant fields; None leaves a field unchanged.

        A replaced photo is deleted from the media host after the update is
        committed. That cleanup never fails the update.
        """
        participant = await self.require_participant(code_name)

        # Validate everything before touching the tracked instance
        if full_name is not None:
            full_name = require_text(full_name, "fullName", FULL_NAME_MAX_LENGTH)
        if about is not None:
            about = require_text(about, "about")
        photo = check_length(photo or None, "photo", PHOTO_URL_MAX_LENGTH)
        if email is not None:
            email = normalize_email(email)
            if email != participant.email and await self._email_in_use(
                email, exclude_participant_id=participant.participant_id
            ):
                raise ConflictError("Email already exists")

        if full_name is not None:
            participant.full_name = full_name
        if about is not None:
            participant.about = about
        if email is not None:
            participant.email = email

        stale_photo = None
        if photo and photo != participant.photo:
            stale_photo = participant.photo
            participant.photo = photo

        await commit_or_conflict(self.db)
        await self.db.refresh(participant)
        logger.info(f"Participant updated: code_name={participant.code_name}")

        if stale_photo:
            await self.media_service.delete_by_url(stale_photo)

        return participant

    async def evict_participant(self, code_name: str) -> Participant:
        """
        Mark a participant as evicted. Eviction is one-way.

        Raises:
            NotFoundError: If the participant does not exist
            ConflictError: If the participant is already evicted
        """
        participant = await self.require_participant(code_name)

        # Conditional update so two concurrent evictions cannot both succeed
        result = await self.db.execute(
            update(Participant)
            .where(
                Participant.participant_id == participant.participant_id,
                Participant.evicted.is_(False),
            )
            .values(evicted=True)
            .execution_options(synchronize_session=False)
        )
        if result.rowcount == 0:
            raise ConflictError("Participant is already evicted")

        await commit_or_conflict(self.db)
        await self.db.refresh(participant)

        logger.info(f"Participant evicted: code_name={participant.code_name}")
        return participant

    async def delete_participant(self, code_name: str) -> None:
        """Delete a participant and its votes, then remove its photo best-effort."""
        participant = await self.require_participant(code_name)
        participant_id = participant.participant_id
        photo = participant.photo

        try:
            await self.db.execute(
                delete(Vote)
                .where(Vote.participant_id == participant_id)
                .execution_options(synchronize_session=False)
            )
            await self.db.execute(
                delete(Participant)
                .where(Participant.participant_id == participant_id)
                .execution_options(synchronize_session=False)
            )
            await self.db.commit()
        except Exception:
            await self.db.rollback()
            raise

        logger.info(f"Participant deleted: code_name={participant.code_name}")

        if photo:
            await self.media_service.delete_by_url(photo)

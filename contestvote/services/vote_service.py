"""Vote ledger: payment-backed and admin votes, and contest results."""
import logging
import uuid
from dataclasses import dataclass
from uuid import UUID

from sqlalchemy import select, func
from sqlalchemy.ext.asyncio import AsyncSession

from contestvote.config import get_settings
from contestvote.models import Contest, Participant, Vote
from contestvote.models.vote import PAYMENT_REFERENCE_MAX_LENGTH, VOTER_NAME_MAX_LENGTH
from contestvote.services.store import commit_or_conflict
from contestvote.utils.exceptions import ConflictError, NotFoundError, ValidationError
from contestvote.utils.identifiers import check_length, parse_identifier, require_code_name, require_text

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ParticipantResult:
    """Vote total of one participant."""
    code_name: str
    name: str
    total_votes: int
    evicted: bool


def validate_vote_count(vote_count, max_votes: int | None = None) -> int:
    """Require a positive integer vote count, no larger than max_votes."""
    if isinstance(vote_count, bool) or not isinstance(vote_count, int):
        raise ValidationError("voteCount must be a positive integer")
    if vote_count < 1:
        raise ValidationError("voteCount must be a positive integer")
    if max_votes is None:
        max_votes = get_settings().max_votes_per_record
    if vote_count > max_votes:
        raise ValidationError(f"voteCount must not exceed {max_votes}")
    return vote_count


class VoteService:
    """Service for recording votes and tallying contest results."""

    def __init__(self, db: AsyncSession):
        self.db = db
        self.settings = get_settings()

    async def _require_contest(self, contest_id: UUID) -> Contest:
        result = await self.db.execute(select(Contest).where(Contest.contest_id == contest_id))
        contest = result.scalar_one_or_none()
        if not contest:
            raise NotFoundError("Contest not found")
        return contest

    async def _require_contest_participant(self, contest_id: UUID, code_name: str) -> Participant:
        """Load the participant with a row lock so eviction cannot interleave with a vote."""
        result = await self.db.execute(
            select(Participant)
            .where(Participant.code_name == code_name)
            .with_for_update()
            .execution_options(populate_existing=True)
        )
        participant = result.scalar_one_or_none()
        if not participant or participant.contest_id != contest_id:
            raise NotFoundError("Participant not found")
        return participant

    async def _reference_in_use(self, payment_reference: str) -> bool:
        result = await self.db.execute(
            select(func.count()).select_from(Vote).where(Vote.payment_reference == payment_reference)
        )
        return result.scalar_one() > 0

    def generate_admin_reference(self) -> str:
        """Synthesize a unique payment reference for admin-issued votes."""
        return f"{self.settings.admin_reference_prefix}{uuid.uuid4()}"

    async def record_vote(
        self,
        contest_id: str | UUID,
        participant_code_name: str,
        vote_count: int,
        voter_name: str,
        payment_reference: str | None = None,
    ) -> Vote:
        """
        Record votes for a participant.

        A payment reference can back at most one vote record; the unique index
        on it is the final arbiter when two requests race with the same one.

        Args:
            contest_id: Contest the participant belongs to
            participant_code_name: Participant code name, e.g. CW001
            vote_count: Number of votes, at least 1
            voter_name: Display name of the voter
            payment_reference: Verified payment transaction reference, if any

        Returns:
            Created Vote

        Raises:
            ValidationError: If an argument is malformed
            NotFoundError: If the contest or participant does not exist
            ConflictError: If the participant is evicted or the reference was already used
        """
        contest_id = parse_identifier(contest_id, "contestId")
        code_name = require_code_name(participant_code_name)
        vote_count = validate_vote_count(vote_count, self.settings.max_votes_per_record)
        voter_name = require_text(voter_name, "voterName", VOTER_NAME_MAX_LENGTH)
        payment_reference = check_length(
            (payment_reference or "").strip() or None, "paymentReference", PAYMENT_REFERENCE_MAX_LENGTH,
        )

        await self._require_contest(contest_id)
        participant = await self._require_contest_participant(contest_id, code_name)

        if participant.evicted:
            raise ConflictError("Participant has been evicted")

        if payment_reference and await self._reference_in_use(payment_reference):
            raise ConflictError("Payment reference already exists")

        vote = Vote(
            contest_id=contest_id,
            participant_id=participant.participant_id,
            vote_count=vote_count,
            voter_name=voter_name,
            payment_reference=payment_reference,
        )
        self.db.add(vote)
        await commit_or_conflict(self.db)
        await self.db.refresh(vote)

        logger.info(
            f"Vote recorded: contest_id={contest_id}, participant={code_name}, "
            f"vote_count={vote_count}, reference={payment_reference}"
        )
        return vote

    async def add_admin_vote(
        self,
        contest_id: str | UUID,
        participant_code_name: str,
        vote_count: int,
        voter_name: str | None = None,
    ) -> Vote:
        """Record admin-issued votes under a freshly generated reference."""
        return await self.record_vote(
            contest_id,
            participant_code_name,
            vote_count,
            voter_name or self.settings.admin_voter_name,
            payment_reference=self.generate_admin_reference(),
        )

    async def results(self, contest_id: str | UUID) -> list[ParticipantResult]:
        """
        Tally votes for every participant of a contest.

        Participants without votes are included with a total of 0. Rows are
        ordered by total descending, then code name.
        """
        contest_id = parse_identifier(contest_id, "contestId")
        await self._require_contest(contest_id)

        total_votes = func.coalesce(func.sum(Vote.vote_count), 0).label("total_votes")
        result = await self.db.execute(
            select(
                Participant.code_name,
                Participant.full_name,
                Participant.evicted,
                total_votes,
            )
            .outerjoin(Vote, Vote.participant_id == Participant.participant_id)
            .where(Participant.contest_id == contest_id)
            .group_by(
                Participant.participant_id,
                Participant.code_name,
                Participant.full_name,
                Participant.evicted,
            )
            .order_by(total_votes.desc(), Participant.code_name.asc())
        )

        return [
            ParticipantResult(
                code_name=row.code_name,
                name=row.full_name,
                total_votes=int(row.total_votes),
                evicted=bool(row.evicted),
            )
            for row in result.all()
        ]

    async def list_votes(self, contest_id: str | UUID, participant_code_name: str) -> list[Vote]:
        """List a participant's votes, newest first."""
        contest_id = parse_identifier(contest_id, "contestId")
        code_name = require_code_name(participant_code_name)

        result = await self.db.execute(
            select(Vote)
            .join(Participant, Vote.participant_id == Participant.participant_id)
            .where(
                Participant.contest_id == contest_id,
                Participant.code_name == code_name,
            )
            .order_by(Vote.created_at.desc())
        )
        return list(result.scalars().all())

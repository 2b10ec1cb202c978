from contestvote.services.store import commit_or_conflict, conflict_from_integrity_error
from contestvote.services.media_service import MediaAsset, MediaService, get_media_service, public_id_from_url
from contestvote.services.contest_service import ContestService
from contestvote.services.participant_service import ParticipantService
from contestvote.services.vote_service import ParticipantResult, VoteService, validate_vote_count
from contestvote.services.payment_service import (
    PaymentInitiation,
    PaymentService,
    VerifiedPayment,
    get_payment_service,
)

"""Payment gateway client (Paystack) for payment-backed votes."""
import asyncio
import logging
from dataclasses import dataclass
from typing import Any, Optional

import aiohttp
from aiohttp import ClientTimeout, ClientError

from contestvote.config import Settings, get_settings
from contestvote.models import Contest, Participant
from contestvote.models.vote import VOTER_NAME_MAX_LENGTH
from contestvote.services.vote_service import validate_vote_count
from contestvote.utils.exceptions import NotFoundError, PaymentError
from contestvote.utils.identifiers import require_text

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class PaymentInitiation:
    """Checkout details returned to the voter."""
    authorization_url: str
    access_code: str
    reference: str


@dataclass(frozen=True)
class VerifiedPayment:
    """A successful transaction and the vote it pays for."""
    reference: str
    amount: int
    contest_id: str
    participant_code_name: str
    vote_count: int
    voter_name: str


class PaymentService:
    """
    Client for the payment gateway.

    Only initiates and verifies transactions; recording the vote is left to
    the VoteService, which trusts the verified reference it is handed.
    """

    def __init__(self, settings: Optional[Settings] = None):
        self.settings = settings or get_settings()
        self.base_url = self.settings.paystack_base_url.rstrip("/")
        self.timeout = ClientTimeout(total=self.settings.payment_timeout_seconds)
        self._session: Optional[aiohttp.ClientSession] = None

    async def __aenter__(self):
        await self._ensure_session()
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        await self.close()

    async def _ensure_session(self):
        """Ensure session exists and is not closed."""
        if self._session is None or self._session.closed:
            self._session = aiohttp.ClientSession(
                timeout=self.timeout,
                headers={"Authorization": f"Bearer {self.settings.paystack_secret_key}"},
            )
            logger.debug("Created new aiohttp session for payment service")

    async def close(self):
        """Close the underlying aiohttp client session."""
        if self._session and not self._session.closed:
            await self._session.close()
            logger.debug("Closed aiohttp session for payment service")
        self._session = None

    def amount_for(self, vote_count: int) -> int:
        """Price of a vote bundle in minor currency units (kobo)."""
        return vote_count * self.settings.vote_price * 100

    async def _request(self, method: str, path: str, payload: dict | None = None) -> dict[str, Any]:
        if not self.settings.payments_configured:
            raise PaymentError("Payments are not configured")

        await self._ensure_session()
        url = f"{self.base_url}{path}"
        try:
            async with self._session.request(method, url, json=payload) as response:
                data = await response.json(content_type=None)
        except asyncio.TimeoutError as e:
            logger.error(f"Payment gateway timeout for {path}")
            raise PaymentError("Payment gateway timeout - please try again") from e
        except ClientError as e:
            logger.error(f"Payment gateway client error for {path}: {e}")
            raise PaymentError("Payment gateway unavailable - please try again") from e

        if response.status != 200 or not data.get("status"):
            message = data.get("message", response.status) if isinstance(data, dict) else response.status
            logger.error(f"Payment gateway error {response.status} for {path}: {message}")
            raise PaymentError(f"Payment gateway error: {message}")
        return data

    async def initiate(
        self,
        contest: Contest,
        participant: Participant,
        vote_count: int,
        email: str,
        voter_name: str,
    ) -> PaymentInitiation:
        """
        Start a checkout for a vote bundle.

        Raises:
            NotFoundError: If the participant is not part of the contest
            ValidationError: If vote_count or voter details are invalid
            PaymentError: If the gateway refuses the transaction
        """
        if participant.contest_id != contest.contest_id:
            raise NotFoundError("Participant not found or does not belong to this contest")
        vote_count = validate_vote_count(vote_count, self.settings.max_votes_per_record)
        email = require_text(email, "email")
        voter_name = require_text(voter_name, "voterName", VOTER_NAME_MAX_LENGTH)

        payload = {
            "email": email,
            "amount": self.amount_for(vote_count),
            "callback_url": (
                f"{self.settings.app_base_url.rstrip('/')}/contests/verify-vote/{contest.contest_id}"
            ),
            "metadata": {
                "contestId": str(contest.contest_id),
                "participantCodeName": participant.code_name,
                "voteCount": vote_count,
                "voterName": voter_name,
            },
        }
        data = await self._request("POST", "/transaction/initialize", payload)
        body = data.get("data") or {}
        if not body.get("authorization_url"):
            raise PaymentError("Failed to initialize payment")

        logger.info(
            f"Payment initiated: reference={body.get('reference')}, contest_id={contest.contest_id}, "
            f"participant={participant.code_name}, vote_count={vote_count}"
        )
        return PaymentInitiation(
            authorization_url=body["authorization_url"],
            access_code=body.get("access_code", ""),
            reference=body.get("reference", ""),
        )

    async def verify(self, reference: str) -> VerifiedPayment:
        """
        Verify a transaction and return the vote it pays for.

        Raises:
            ValidationError: If the reference is blank
            PaymentError: If the transaction did not succeed or lacks vote metadata
        """
        reference = require_text(reference, "reference")
        data = await self._request("GET", f"/transaction/verify/{reference}")
        body = data.get("data") or {}

        if body.get("status") != "success":
            raise PaymentError("Payment not successful")

        metadata = body.get("metadata")
        if not isinstance(metadata, dict):
            raise PaymentError("Payment metadata is missing")

        try:
            verified = VerifiedPayment(
                reference=body.get("reference") or reference,
                amount=int(body.get("amount") or 0),
                contest_id=str(metadata["contestId"]),
                participant_code_name=str(metadata["participantCodeName"]),
                vote_count=int(metadata["voteCount"]),
                voter_name=str(metadata["voterName"]),
            )
        except (KeyError, TypeError, ValueError) as e:
            raise PaymentError("Payment metadata is incomplete") from e

        logger.info(f"Payment verified: reference={verified.reference}, amount={verified.amount}")
        return verified


_payment_service: PaymentService | None = None


def get_payment_service() -> PaymentService:
    """Get the process-wide payment service instance."""
    global _payment_service
    if _payment_service is None:
        _payment_service = PaymentService()
    return _payment_service

"""Store adapter: turns database constraint violations into service errors."""
import logging

from sqlalchemy.exc import DataError, IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from contestvote.utils.exceptions import ConflictError, ValidationError

logger = logging.getLogger(__name__)

# constraint name (PostgreSQL) and table.column signature (SQLite) -> message
_UNIQUE_VIOLATIONS = (
    (("uq_participants_email", "participants.email"), "Email already exists"),
    (("uq_participants_code_name", "participants.code_name"), "Participant code name already exists"),
    (("uq_votes_payment_reference", "votes.payment_reference"), "Payment reference already exists"),
)


def _constraint_name(exc: IntegrityError) -> str | None:
    """Read the violated constraint name from the driver error when available."""
    orig = getattr(exc, "orig", None)
    diag = getattr(orig, "diag", None)
    if diag is not None and getattr(diag, "constraint_name", None):
        return diag.constraint_name
    # asyncpg exposes it directly on the exception
    return getattr(orig, "constraint_name", None)


def conflict_from_integrity_error(exc: IntegrityError) -> ConflictError:
    """Translate an IntegrityError into a ConflictError with a stable message."""
    constraint_name = _constraint_name(exc)
    error_message = str(exc).lower()

    for signatures, message in _UNIQUE_VIOLATIONS:
        if constraint_name in signatures:
            return ConflictError(message)
        if any(signature in error_message for signature in signatures):
            return ConflictError(message)

    logger.warning(f"Unmapped integrity error: {exc}")
    return ConflictError("Operation conflicts with existing data")


async def commit_or_conflict(db: AsyncSession) -> None:
    """
    Commit the session, rolling back on constraint violations.

    Raises:
        ConflictError: On a uniqueness or other integrity violation
        ValidationError: If the database rejects a value as out of range or too long
    """
    try:
        await db.commit()
    except IntegrityError as exc:
        await db.rollback()
        raise conflict_from_integrity_error(exc) from exc
    except DataError as exc:
        await db.rollback()
        logger.warning(f"Value rejected by the database: {exc}")
        raise ValidationError("Value does not fit the stored field") from exc

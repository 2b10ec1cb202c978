"""Tests for the IntegrityError to ConflictError translation."""
import pytest
from unittest.mock import AsyncMock, MagicMock

from sqlalchemy.exc import DataError, IntegrityError

from contestvote.services.store import commit_or_conflict, conflict_from_integrity_error
from contestvote.utils.exceptions import ConflictError, ValidationError


def _integrity_error(message: str, constraint_name: str | None = None) -> IntegrityError:
    orig = Exception(message)
    if constraint_name:
        orig.constraint_name = constraint_name
    return IntegrityError("INSERT ...", {}, orig)


@pytest.mark.parametrize(
    "message,constraint_name,expected",
    [
        ("UNIQUE constraint failed: participants.email", None, "Email already exists"),
        ("UNIQUE constraint failed: participants.code_name", None, "Participant code name already exists"),
        ("UNIQUE constraint failed: votes.payment_reference", None, "Payment reference already exists"),
        ("duplicate key value", "uq_participants_email", "Email already exists"),
        ("duplicate key value", "uq_votes_payment_reference", "Payment reference already exists"),
    ],
)
def test_known_constraints_map_to_messages(message, constraint_name, expected):
    error = conflict_from_integrity_error(_integrity_error(message, constraint_name))
    assert isinstance(error, ConflictError)
    assert error.message == expected


def test_unknown_constraint_becomes_generic_conflict():
    error = conflict_from_integrity_error(_integrity_error("CHECK constraint failed: something"))
    assert error.message == "Operation conflicts with existing data"
    assert error.status_code == 409


async def test_commit_or_conflict_rolls_back():
    db = MagicMock()
    db.commit = AsyncMock(side_effect=_integrity_error("UNIQUE constraint failed: participants.email"))
    db.rollback = AsyncMock()

    with pytest.raises(ConflictError):
        await commit_or_conflict(db)
    db.rollback.assert_awaited_once()


async def test_commit_or_conflict_commits():
    db = MagicMock()
    db.commit = AsyncMock()
    db.rollback = AsyncMock()

    await commit_or_conflict(db)

    db.commit.assert_awaited_once()
    db.rollback.assert_not_awaited()


async def test_commit_or_conflict_turns_data_error_into_validation_error():
    db = MagicMock()
    db.commit = AsyncMock(side_effect=DataError(
        "INSERT ...", {}, Exception("value too long for type character varying(200)"),
    ))
    db.rollback = AsyncMock()

    with pytest.raises(ValidationError) as exc_info:
        await commit_or_conflict(db)
    assert exc_info.value.status_code == 400
    db.rollback.assert_awaited_once()

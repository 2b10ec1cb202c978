"""Tests for settings validation."""
import pytest

from contestvote.config import MAX_INT32, Settings


def test_max_votes_per_record_default():
    assert Settings().max_votes_per_record == 100_000


def test_max_votes_per_record_may_reach_column_limit():
    assert Settings(max_votes_per_record=MAX_INT32).max_votes_per_record == 2**31 - 1


@pytest.mark.parametrize("value", [0, -1, MAX_INT32 + 1])
def test_max_votes_per_record_out_of_range(value):
    with pytest.raises(ValueError, match="max_votes_per_record"):
        Settings(max_votes_per_record=value)


def test_postgres_url_uses_asyncpg():
    settings = Settings(database_url="postgres://user:pw@localhost:5432/contests")
    assert settings.database_url.startswith("postgresql+asyncpg://")

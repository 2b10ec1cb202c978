"""Utility functions for Alembic migrations."""
import sqlalchemy as sa
from sqlalchemy.dialects.postgresql import UUID
from alembic import op


def get_uuid_type():
    """Get the UUID column type for the current database dialect.

    PostgreSQL gets a native UUID; everything else gets String(36), matching
    the hex strings written by ``contestvote.models.base.AdaptiveUUID``.
    """
    bind = op.get_bind()
    if bind.dialect.name == 'postgresql':
        return UUID(as_uuid=True)
    return sa.String(length=36)


def get_false_default():
    """Server default for boolean flags that start out false."""
    bind = op.get_bind()
    if bind.dialect.name == 'postgresql':
        return sa.text('false')
    return sa.text('0')

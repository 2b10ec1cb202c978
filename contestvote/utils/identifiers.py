"""Validation of externally supplied identifiers."""
from uuid import UUID

from contestvote.utils.exceptions import ValidationError


def parse_identifier(value, label: str = "id") -> UUID:
    """Parse a contest/participant/vote id before it reaches a query.

    Args:
        value: Raw identifier (string or UUID)
        label: Field name used in the error message

    Returns:
        UUID: Parsed identifier

    Raises:
        ValidationError: If the value is missing or not a valid id
    """
    if isinstance(value, UUID):
        return value
    if value is None or not str(value).strip():
        raise ValidationError(f"Valid {label} is required")
    try:
        return UUID(str(value).strip())
    except (ValueError, AttributeError, TypeError) as exc:
        raise ValidationError(f"Valid {label} is required") from exc


def require_code_name(value: str | None) -> str:
    """Return the stripped code name or raise if it is blank."""
    if value is None or not str(value).strip():
        raise ValidationError("codeName is required")
    return str(value).strip()


def require_text(value: str | None, label: str, max_length: int | None = None) -> str:
    """Return the stripped text or raise if it is blank or longer than max_length."""
    if value is None or not str(value).strip():
        raise ValidationError(f"{label} is required")
    return check_length(str(value).strip(), label, max_length)


def check_length(value: str | None, label: str, max_length: int | None) -> str | None:
    """Raise if value does not fit a column of max_length characters."""
    if value is not None and max_length is not None and len(value) > max_length:
        raise ValidationError(f"{label} must be at most {max_length} characters")
    return value

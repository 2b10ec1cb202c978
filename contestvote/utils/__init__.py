"""Utilities module."""
from contestvote.utils.datetime_helpers import ensure_utc
from contestvote.utils.identifiers import check_length, parse_identifier, require_code_name, require_text

__all__ = ["check_length", "ensure_utc", "parse_identifier", "require_code_name", "require_text"]

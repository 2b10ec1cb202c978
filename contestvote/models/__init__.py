"""Database models."""
from contestvote.models.contest import Contest
from contestvote.models.participant import Participant
from contestvote.models.vote import Vote

__all__ = ["Contest", "Participant", "Vote"]

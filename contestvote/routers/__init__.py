from contestvote.routers import contests, participants, votes, media, health

__all__ = ["contests", "participants", "votes", "media", "health"]

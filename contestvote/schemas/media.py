"""Media-related Pydantic schemas."""
from contestvote.schemas.base import BaseSchema


class ImageDeleteRequest(BaseSchema):
    """Image to remove from the media host, by public id and/or delivery URL."""
    public_id: str | None = None
    image_url: str | None = None


class ImageDeleteResponse(BaseSchema):
    success: bool
    message: str

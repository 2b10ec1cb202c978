"""Media API router: removal of uploaded images."""
import logging

from fastapi import APIRouter, Depends

from contestvote.schemas.media import ImageDeleteRequest, ImageDeleteResponse
from contestvote.services.media_service import MediaService, get_media_service
from contestvote.utils.exceptions import MediaError, ValidationError

logger = logging.getLogger(__name__)

router = APIRouter(tags=["media"])


@router.post("/delete-image", response_model=ImageDeleteResponse)
async def delete_image(
        delete_request: ImageDeleteRequest,
        media_service: MediaService = Depends(get_media_service),
):
    """Delete an image by public id, delivery URL, or both."""
    public_id = (delete_request.public_id or "").strip()
    image_url = (delete_request.image_url or "").strip()
    if not public_id and not image_url:
        raise ValidationError("Provide either publicId or imageUrl")

    deleted = True
    if public_id:
        deleted = await media_service.delete(public_id) and deleted
    if image_url:
        deleted = await media_service.delete_by_url(image_url) and deleted

    if not deleted:
        raise MediaError("Failed to delete image")

    return ImageDeleteResponse(success=True, message="Image successfully deleted")

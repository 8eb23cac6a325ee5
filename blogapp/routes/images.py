"""
Image upload route. Blogs reference the returned URL in ``imageUrl``.
"""
from fastapi import APIRouter, Depends, File, UploadFile

from ..auth import get_required_user
from ..config import Settings, get_settings
from ..dependencies import get_image_storage
from ..logging_config import api_logger
from ..responses import payload_too_large, success, validation_error
from ..storage import ImageStorage

router = APIRouter(prefix="/api/images", tags=["images"])


@router.post("")
async def upload_image(
    file: UploadFile = File(...),
    storage: ImageStorage = Depends(get_image_storage),
    config: Settings = Depends(get_settings),
    current_user=Depends(get_required_user),
):
    """Store an uploaded image and return its public URL."""
    if not file.content_type or not file.content_type.startswith("image/"):
        validation_error("Only image uploads are allowed", {"content_type": file.content_type})

    data = await file.read(config.max_image_bytes + 1)
    if len(data) > config.max_image_bytes:
        payload_too_large(f"Image exceeds {config.max_image_bytes} bytes")
    if not data:
        validation_error("Uploaded file is empty")

    url = storage.upload(file.filename or "image", data, file.content_type)
    api_logger.info("Uploaded blog image", url=url, size=len(data), username=current_user)
    return success({"url": url}, message="Image uploaded")

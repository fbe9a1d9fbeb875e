"""routes/upload.py – POST /api/upload/image (multipart field `image`)"""
from typing import Optional

from fastapi import APIRouter, Depends, File, UploadFile

from ..core.errors import ValidationError
from ..deps import current_principal, get_blobs
from ..models import UploadResult

router = APIRouter(prefix="/api/upload", tags=["Upload"])


@router.post("/image", response_model=UploadResult, dependencies=[Depends(current_principal)])
async def upload_image(image: Optional[UploadFile] = File(default=None)):
    if image is None:
        raise ValidationError("No file uploaded")
    data = await image.read()
    return await get_blobs().put(data, image.filename or "", image.content_type or "")

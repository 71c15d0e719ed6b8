"""Image endpoints: upload to a note, delete, and authenticated file serving."""

import logging
import os
from typing import Annotated

from fastapi import APIRouter, Depends, File, Form, HTTPException, UploadFile
from fastapi.responses import FileResponse
from sqlalchemy.orm import Session

from tracky.api.deps import AppSettings, CurrentUserId
from tracky.core.database import get_db
from tracky.core.errors import NotFoundError
from tracky.schemas.auth import MessageResponse
from tracky.schemas.note import ImageUploadResponse
from tracky.services import store
from tracky.services.images import (
    ImageProcessingError,
    build_filename,
    compress_image,
    image_extension,
    remove_image_files,
    save_image,
)

logger = logging.getLogger(__name__)

router = APIRouter()
# Mounted without the API prefix: image URLs are /uploads/{id}
files_router = APIRouter()


@router.post("", response_model=ImageUploadResponse)
def upload_image(
    note_id: Annotated[int, Form(description="Note to attach the image to")],
    image: Annotated[UploadFile, File(description="jpg, jpeg, png, gif or webp")],
    user_id: CurrentUserId,
    db: Annotated[Session, Depends(get_db)],
    settings: AppSettings,
) -> ImageUploadResponse:
    """
    Attach an image to one of the caller's notes.

    JPEG and PNG uploads are downscaled to MAX_IMAGE_DIMENSION and stored as JPEG;
    GIF and WebP are stored unchanged.
    """
    try:
        store.get_note(db, note_id, user_id)
    except NotFoundError as e:
        raise HTTPException(status_code=404, detail="Note not found") from e

    try:
        ext = image_extension(image.filename or "")
    except ImageProcessingError as e:
        raise HTTPException(status_code=400, detail=e.message) from e

    content = image.file.read(settings.MAX_UPLOAD_BYTES + 1)
    if len(content) > settings.MAX_UPLOAD_BYTES:
        raise HTTPException(status_code=400, detail="File too large")
    if not content:
        raise HTTPException(status_code=400, detail="No image provided")

    try:
        processed = compress_image(
            content,
            ext,
            max_dimension=settings.MAX_IMAGE_DIMENSION,
            jpeg_quality=settings.JPEG_QUALITY,
        )
    except ImageProcessingError as e:
        raise HTTPException(status_code=400, detail=e.message) from e

    filename = build_filename(user_id, note_id, processed.extension)
    save_image(settings.UPLOAD_DIR, filename, processed.data)
    try:
        row = store.create_note_image(db, note_id, user_id, filename)
    except NotFoundError as e:
        # Note deleted between the ownership check and the insert
        remove_image_files(settings.UPLOAD_DIR, [filename])
        raise HTTPException(status_code=404, detail="Note not found") from e
    logger.info(
        "Image stored",
        extra={"user_id": user_id, "note_id": note_id, "bytes": len(processed.data)},
    )
    return ImageUploadResponse(id=row.id, filename=filename)


@router.delete("/{image_id}", response_model=MessageResponse)
def delete_image(
    image_id: int,
    user_id: CurrentUserId,
    db: Annotated[Session, Depends(get_db)],
    settings: AppSettings,
) -> MessageResponse:
    try:
        filename = store.delete_note_image(db, image_id, user_id)
    except NotFoundError as e:
        raise HTTPException(status_code=404, detail="Image not found") from e
    remove_image_files(settings.UPLOAD_DIR, [filename])
    return MessageResponse(message="Image deleted")


@files_router.get("/uploads/{image_id}", response_class=FileResponse)
def serve_image(
    image_id: int,
    user_id: CurrentUserId,
    db: Annotated[Session, Depends(get_db)],
    settings: AppSettings,
) -> FileResponse:
    """Serve an image file only if its note belongs to the caller."""
    try:
        filename = store.get_note_image_filename(db, image_id, user_id)
    except NotFoundError as e:
        raise HTTPException(status_code=404, detail="Image not found") from e
    path = os.path.join(settings.UPLOAD_DIR, os.path.basename(filename))
    if not os.path.isfile(path):
        raise HTTPException(status_code=404, detail="Image not found")
    return FileResponse(path)

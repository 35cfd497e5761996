from typing import List, Optional

from fastapi import APIRouter, Depends, File, UploadFile

from shipdesk.auth.dependencies import get_current_admin_user
from shipdesk.auth.routes import get_current_user
from shipdesk.core.exceptions import NotFoundError, ValidationError
from shipdesk.services import media
from shipdesk.utils.storage import StorageBackend, get_storage

router = APIRouter(prefix="/api/upload", tags=["upload"])

MEDIA_TYPES = {"image": "image", "images": "image", "video": "video", "videos": "video"}


@router.post("/upload")
async def upload_images(
    images: Optional[List[UploadFile]] = File(None),
    user=Depends(get_current_user),
    storage: StorageBackend = Depends(get_storage),
):
    if not images:
        raise ValidationError("No images were uploaded.")
    stored = await media.store_media(storage, images=images)
    return {
        "status": True,
        "message": "Images uploaded successfully",
        "count": len(stored["images"]),
        "files": stored["images"],
    }


@router.post("/media")
async def upload_media(
    images: Optional[List[UploadFile]] = File(None),
    videos: Optional[List[UploadFile]] = File(None),
    user=Depends(get_current_user),
    storage: StorageBackend = Depends(get_storage),
):
    if not images and not videos:
        raise ValidationError("No files were uploaded.")
    stored = await media.store_media(storage, images=images, videos=videos)
    return {
        "status": True,
        "message": "Media uploaded successfully",
        "images": stored["images"],
        "videos": stored["videos"],
    }


@router.get("/images")
async def list_images(user=Depends(get_current_user), storage: StorageBackend = Depends(get_storage)):
    images = await media.list_media(storage, "image")
    return {"status": True, "message": "Images fetched successfully", "count": len(images), "images": images}


@router.get("/videos")
async def list_videos(user=Depends(get_current_user), storage: StorageBackend = Depends(get_storage)):
    videos = await media.list_media(storage, "video")
    return {"status": True, "message": "Videos fetched successfully", "count": len(videos), "videos": videos}


# declared before /{media_type}/{filename} so "cleanup" isn't read as a type
@router.delete("/cleanup")
async def cleanup_uploads(
    admin=Depends(get_current_admin_user),
    storage: StorageBackend = Depends(get_storage),
):
    deleted = await media.cleanup_media(storage)
    return {"status": True, "message": "All uploaded media deleted", "deleted": deleted}


@router.delete("/images/{filename}")
async def delete_image(
    filename: str,
    user=Depends(get_current_user),
    storage: StorageBackend = Depends(get_storage),
):
    if not await media.delete_media(storage, "image", filename):
        raise NotFoundError("Image not found")
    return {"status": True, "message": "Image deleted successfully"}


@router.delete("/{media_type}/{filename}")
async def delete_file(
    media_type: str,
    filename: str,
    user=Depends(get_current_user),
    storage: StorageBackend = Depends(get_storage),
):
    kind = MEDIA_TYPES.get(media_type)
    if kind is None:
        raise ValidationError("Invalid file type. Use 'image' or 'video'.")
    if not await media.delete_media(storage, kind, filename):
        raise NotFoundError("File not found")
    return {"status": True, "message": f"{kind.capitalize()} deleted successfully"}

"""
Validate and store uploaded images and videos.

Shared by the upload API and the shipment media endpoint. Every file is read
and checked before anything is written, so a rejected request stores nothing.
"""
import logging
from typing import List, Optional, Sequence

from fastapi import UploadFile

from shipdesk.core.constants import (
    ALLOWED_IMAGE_EXTENSIONS,
    ALLOWED_VIDEO_EXTENSIONS,
    MAX_IMAGE_SIZE,
    MAX_IMAGES_PER_UPLOAD,
    MAX_MEDIA_PAYLOAD,
    MAX_VIDEOS_PER_UPLOAD,
    UPLOAD_PATHS,
)
from shipdesk.core.exceptions import ValidationError
from shipdesk.utils.security import generate_stored_filename, validate_and_read
from shipdesk.utils.storage import StorageBackend

log = logging.getLogger(__name__)

MEDIA_KINDS = {
    "image": {"allowed": ALLOWED_IMAGE_EXTENSIONS, "max_size": MAX_IMAGE_SIZE, "max_files": MAX_IMAGES_PER_UPLOAD},
    "video": {"allowed": ALLOWED_VIDEO_EXTENSIONS, "max_size": MAX_MEDIA_PAYLOAD, "max_files": MAX_VIDEOS_PER_UPLOAD},
}


def folder_for(kind: str, *, shipment: bool = False) -> str:
    if shipment:
        return UPLOAD_PATHS[f"shipment_{kind}s"]
    return UPLOAD_PATHS[f"{kind}s"]


async def _read_all(files: Sequence[UploadFile], kind: str) -> list:
    rules = MEDIA_KINDS[kind]
    if len(files) > rules["max_files"]:
        raise ValidationError(f"Too many files. Maximum {rules['max_files']} {kind}s allowed per upload.")
    read = []
    for f in files:
        contents, _ = await validate_and_read(
            f, kind=kind, allowed_extensions=rules["allowed"], max_size=rules["max_size"]
        )
        read.append((f, contents))
    return read


async def store_media(
    storage: StorageBackend,
    *,
    images: Optional[Sequence[UploadFile]] = None,
    videos: Optional[Sequence[UploadFile]] = None,
    shipment: bool = False,
) -> dict:
    """Returns ``{"images": [...], "videos": [...]}`` describing each stored file."""
    pending = {
        "image": await _read_all(images or [], "image"),
        "video": await _read_all(videos or [], "video"),
    }
    total = sum(len(contents) for batch in pending.values() for _, contents in batch)
    if total > MAX_MEDIA_PAYLOAD:
        raise ValidationError(
            f"Upload too large. Maximum combined size is {MAX_MEDIA_PAYLOAD // (1024 * 1024)}MB."
        )

    stored = {"images": [], "videos": []}
    for kind, batch in pending.items():
        folder = folder_for(kind, shipment=shipment)
        for upload, contents in batch:
            filename = generate_stored_filename(kind, upload.filename)
            key = await storage.put(f"{folder}/{filename}", contents, upload.content_type)
            stored[f"{kind}s"].append(
                {
                    "filename": filename,
                    "originalName": upload.filename,
                    "size": len(contents),
                    "mimetype": upload.content_type,
                    "url": storage.url(key),
                    "path": key,
                }
            )
    log.info("media stored: images=%s videos=%s", len(stored["images"]), len(stored["videos"]))
    return stored


async def list_media(storage: StorageBackend, kind: str) -> List[dict]:
    allowed = MEDIA_KINDS[kind]["allowed"]
    files = []
    for key in await storage.list(folder_for(kind)):
        filename = key.rsplit("/", 1)[-1]
        if "." + filename.rsplit(".", 1)[-1].lower() not in allowed:
            continue
        files.append({"filename": filename, "url": storage.url(key), "path": key})
    return files


async def delete_media(storage: StorageBackend, kind: str, filename: str) -> bool:
    if "/" in filename or "\\" in filename or filename in ("", ".", ".."):
        raise ValidationError("Invalid filename")
    return await storage.delete(f"{folder_for(kind)}/{filename}")


async def cleanup_media(storage: StorageBackend) -> dict:
    deleted = {}
    for kind in MEDIA_KINDS:
        count = 0
        for key in await storage.list(folder_for(kind)):
            if await storage.delete(key):
                count += 1
        deleted[f"{kind}s"] = count
    log.warning("media cleanup: deleted images=%s videos=%s", deleted["images"], deleted["videos"])
    return deleted

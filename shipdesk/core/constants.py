# 📁 Storage folders, relative to the storage root
UPLOAD_PATHS = {
    "images": "images",
    "videos": "videos",
    "shipment_images": "shipment-images",
    "shipment_videos": "shipment-videos",
}

# Public URL prefix for locally stored files
UPLOADS_URL_PREFIX = "/uploads"

ALLOWED_IMAGE_EXTENSIONS = {".jpeg", ".jpg", ".png", ".gif", ".webp"}
ALLOWED_VIDEO_EXTENSIONS = {".mp4", ".mov", ".avi", ".wmv", ".webm"}

MAX_IMAGE_SIZE = 10 * 1024 * 1024  # 10MB per image
MAX_IMAGES_PER_UPLOAD = 10
MAX_VIDEOS_PER_UPLOAD = 1
MAX_MEDIA_PAYLOAD = 100 * 1024 * 1024  # 100MB for images + videos together

DEFAULT_PAGE_SIZE = 10
MAX_PAGE_SIZE = 100

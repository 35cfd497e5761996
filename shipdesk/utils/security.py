# utils/security.py

import os
import random
import time
from typing import Iterable, Tuple

from fastapi import UploadFile
from fastapi_users.password import PasswordHelper

from shipdesk.core.exceptions import ValidationError

password_helper = PasswordHelper()


def hash_password(plain: str) -> str:
    return password_helper.hash(plain)


def generate_stored_filename(prefix: str, original_filename: str) -> str:
    """``<prefix>-<epochMillis>-<rand9digits><ext>``"""
    ext = os.path.splitext(original_filename or "")[1].lower()
    millis = int(time.time() * 1000)
    return f"{prefix}-{millis}-{random.randint(100000000, 999999999)}{ext}"


async def validate_and_read(
    file: UploadFile,
    *,
    kind: str,
    allowed_extensions: Iterable[str],
    max_size: int,
) -> Tuple[bytes, str]:
    """Check extension, content type and size; returns (contents, extension)."""
    ext = os.path.splitext(file.filename or "")[1].lower()
    content_type = (file.content_type or "").lower()
    allowed = sorted(e.lstrip(".") for e in allowed_extensions)

    if ext not in allowed_extensions or not content_type.startswith(f"{kind}/"):
        raise ValidationError(
            f"Invalid {kind} type. Only {kind}s ({', '.join(allowed)}) are allowed."
        )

    contents = await file.read()
    if len(contents) > max_size:
        raise ValidationError(
            f"File too large. Maximum size is {max_size // (1024 * 1024)}MB per {kind}."
        )
    return contents, ext

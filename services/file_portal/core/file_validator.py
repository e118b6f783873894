# services/file_portal/core/file_validator.py
import logging
import os
from typing import Optional

from shared.config import settings

logger = logging.getLogger(__name__)

MAX_FILE_SIZE = 100 * 1024 * 1024

ALLOWED_EXTENSIONS = frozenset({
    ".pdf", ".jpg", ".jpeg", ".png", ".gif", ".bmp", ".webp",
    ".mp4", ".avi", ".mov", ".wmv", ".flv", ".webm",
    ".mp3", ".wav", ".flac", ".aac", ".ogg",
    ".txt", ".doc", ".docx", ".ppt", ".pptx", ".xls", ".xlsx",
})

BLOCKED_EXTENSIONS = frozenset({
    ".exe", ".bat", ".cmd", ".com", ".pif", ".scr", ".vbs", ".js",
    ".jar", ".asp", ".aspx", ".php", ".ps1", ".sh",
})


def _reject(reason: str, file_name: str, **fields) -> bool:
    logger.warning(
        f"Upload rejected ({reason}): {file_name}",
        extra={"event_type": "upload_rejected", "reason": reason, "file_name": file_name, **fields}
    )
    return False


def validate_upload(
    file_name: Optional[str],
    size: Optional[int],
    max_size: Optional[int] = None,
    allowed_extensions=ALLOWED_EXTENSIONS,
    blocked_extensions=BLOCKED_EXTENSIONS,
) -> bool:
    """
    Decide whether an upload may be stored. Returns a boolean, never raises.

    The blocklist is consulted before the allowlist so an extension that
    lands on both is still refused.
    """
    max_size = settings.MAX_UPLOAD_SIZE if max_size is None else max_size
    file_name = file_name or ""

    if not size:
        return _reject("empty", file_name, size=size or 0)

    if size > max_size:
        return _reject("size", file_name, size=size, max_size=max_size)

    extension = os.path.splitext(file_name)[1].lower()

    if extension in blocked_extensions:
        return _reject("blocked_extension", file_name, extension=extension)

    if extension not in allowed_extensions:
        return _reject("extension_not_allowed", file_name, extension=extension)

    return True

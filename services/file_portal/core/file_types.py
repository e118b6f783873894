# services/file_portal/core/file_types.py
import os

DEFAULT_CONTENT_TYPE = "application/octet-stream"

CONTENT_TYPES = {
    ".pdf": "application/pdf",
    ".jpg": "image/jpeg",
    ".jpeg": "image/jpeg",
    ".png": "image/png",
    ".gif": "image/gif",
    ".bmp": "image/bmp",
    ".webp": "image/webp",
    ".mp4": "video/mp4",
    ".avi": "video/x-msvideo",
    ".mov": "video/quicktime",
    ".wmv": "video/x-ms-wmv",
    ".flv": "video/x-flv",
    ".webm": "video/webm",
    ".mp3": "audio/mpeg",
    ".wav": "audio/wav",
    ".flac": "audio/flac",
    ".aac": "audio/aac",
    ".ogg": "audio/ogg",
    ".txt": "text/plain",
    ".doc": "application/msword",
    ".docx": "application/vnd.openxmlformats-officedocument.wordprocessingml.document",
    ".ppt": "application/vnd.ms-powerpoint",
    ".pptx": "application/vnd.openxmlformats-officedocument.presentationml.presentation",
    ".xls": "application/vnd.ms-excel",
    ".xlsx": "application/vnd.openxmlformats-officedocument.spreadsheetml.sheet",
}

IMAGE_EXTENSIONS = {".jpg", ".jpeg", ".png", ".gif", ".bmp", ".webp"}
VIDEO_EXTENSIONS = {".mp4", ".avi", ".mov", ".wmv", ".flv", ".webm"}
AUDIO_EXTENSIONS = {".mp3", ".wav", ".flac", ".aac", ".ogg"}
OFFICE_EXTENSIONS = {".doc", ".docx", ".ppt", ".pptx", ".xls", ".xlsx"}


def _normalize(extension: str) -> str:
    extension = (extension or "").lower()
    if extension and not extension.startswith("."):
        # Accept a whole file name as well as a bare extension.
        extension = os.path.splitext(extension)[1] or f".{extension}"
    return extension


def content_type_for(extension: str) -> str:
    return CONTENT_TYPES.get(_normalize(extension), DEFAULT_CONTENT_TYPE)


def viewer_kind(extension: str) -> str:
    """Which client-side viewer can show a file of this type."""
    extension = _normalize(extension)
    if extension in IMAGE_EXTENSIONS:
        return "image"
    if extension in VIDEO_EXTENSIONS:
        return "video"
    if extension in AUDIO_EXTENSIONS:
        return "audio"
    if extension == ".pdf":
        return "pdf"
    if extension == ".txt":
        return "text"
    if extension in OFFICE_EXTENSIONS:
        return "office"
    return "other"


def format_file_size(size_in_bytes: int) -> str:
    kb = 1024
    mb = kb * 1024
    gb = mb * 1024

    if size_in_bytes < kb:
        return f"{size_in_bytes} B"
    if size_in_bytes < mb:
        return f"{size_in_bytes / kb:.1f} KB"
    if size_in_bytes < gb:
        return f"{size_in_bytes / mb:.1f} MB"
    return f"{size_in_bytes / gb:.1f} GB"

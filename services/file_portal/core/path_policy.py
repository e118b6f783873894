# services/file_portal/core/path_policy.py
"""
Where files live on disk.

Every stored path is relative to the storage root and has the shape
``uploads/Class <code>/<subject>/<file name>``. These helpers do no I/O and
never raise.
"""

import os
import re
import uuid
from posixpath import join

UPLOADS_DIR = "uploads"
CLASS_DIR_PREFIX = "Class "
MAX_FILE_NAME_LENGTH = 100

# Union of what Windows and POSIX refuse in a single path component.
_ILLEGAL_CHARS = re.compile(r'[<>:"/\\|?*\x00-\x1f]+')
_REPEATED_UNDERSCORES = re.compile(r"_+")


def _clean(value: str) -> str:
    cleaned = _ILLEGAL_CHARS.sub("_", value or "")
    cleaned = _REPEATED_UNDERSCORES.sub("_", cleaned)
    # Windows drops trailing dots and spaces silently; strip them up front.
    return cleaned.strip("_ ").rstrip(". ")


def _fallback_token() -> str:
    return f"file_{uuid.uuid4().hex[:12]}"


def sanitize_path_segment(value: str) -> str:
    """Make a class code or subject name safe to use as one directory name."""
    segment = _clean(value)
    if not segment or set(segment) == {"."}:
        return "_"
    return segment


def class_directory(class_code: str) -> str:
    return join(UPLOADS_DIR, f"{CLASS_DIR_PREFIX}{sanitize_path_segment(class_code)}")


def subject_directory(class_code: str, subject: str) -> str:
    return join(class_directory(class_code), sanitize_path_segment(subject))


def sanitize_file_name(raw: str) -> str:
    """
    Turn an untrusted upload name into a legal on-disk name.

    Illegal characters become underscores, runs of underscores collapse, and
    the result is trimmed to MAX_FILE_NAME_LENGTH characters with the
    extension kept. A name that cleans down to nothing gets a random token.
    """
    name = _clean(raw)
    if not name or set(name) == {"."}:
        return _fallback_token()

    if len(name) > MAX_FILE_NAME_LENGTH:
        stem, extension = os.path.splitext(name)
        if len(extension) >= MAX_FILE_NAME_LENGTH // 2:
            name = name[:MAX_FILE_NAME_LENGTH].rstrip(". ")
        else:
            name = stem[:MAX_FILE_NAME_LENGTH - len(extension)] + extension
        if not name or set(name) == {"."}:
            return _fallback_token()

    return name


def is_clean_class_code(class_code: str) -> bool:
    """True when the code is used verbatim as its directory name."""
    return bool(class_code) and sanitize_path_segment(class_code) == class_code


def unique_file_name(raw: str) -> str:
    """Sanitized base name plus a 128-bit random token before the extension."""
    stem, extension = os.path.splitext(sanitize_file_name(raw))
    return f"{stem}_{uuid.uuid4().hex}{extension}"


def rebase_stored_path(stored_path: str, old_class_code: str, new_class_code: str) -> str:
    """
    Swap the class directory prefix of a stored path.

    Only the leading directory is replaced so a subject or file name that
    happens to contain the old class text is left alone.
    """
    old_prefix = class_directory(old_class_code) + "/"
    normalized = stored_path.replace("\\", "/")
    if not normalized.startswith(old_prefix):
        return stored_path
    return class_directory(new_class_code) + "/" + normalized[len(old_prefix):]

"""Local-disk storage for role description documents.

Uploaded files are written under the attachments root with a short random
prefix in front of a sanitized copy of the original name. Only the stored
name is kept in the database; lookups always strip directories from it.
"""

from __future__ import annotations

import logging
import os
import re
import secrets
from pathlib import Path

import config

logger = logging.getLogger(__name__)

_UNSAFE_CHARS = re.compile(r"[^a-zA-Z0-9._-]+")


def attachments_root() -> Path:
    return config.attachments_root()


def ensure_attachments_dir() -> Path:
    root = attachments_root()
    root.mkdir(parents=True, exist_ok=True)
    return root


def sanitize_filename(name: str) -> str:
    """Replace runs of unsafe characters with '_'; '' for blank names."""
    trimmed = (name or "").strip()
    if not trimmed:
        return ""
    return _UNSAFE_CHARS.sub("_", trimmed)


def build_stored_filename(original_name: str) -> str:
    safe_name = sanitize_filename(original_name) or "document"
    prefix = secrets.token_hex(4)[:5]
    return f"{prefix}_{safe_name}"


def resolve_attachment_path(file_name: str) -> Path:
    """Path for *file_name* inside the root; directory parts are dropped."""
    safe_name = os.path.basename(file_name.replace("\\", "/"))
    return attachments_root() / safe_name


def save_upload(upload) -> tuple[str, str]:
    """Write a werkzeug FileStorage to disk.

    Returns:
        Tuple of (stored_name, display_name).
    """
    ensure_attachments_dir()
    display_name = upload.filename or ""
    stored_name = build_stored_filename(display_name or "document")
    upload.save(str(resolve_attachment_path(stored_name)))
    logger.info("Stored attachment %s", stored_name)
    return stored_name, display_name or stored_name


def remove_attachment(stored_name: str | None) -> bool:
    """Delete a stored file. Returns True if a file was removed."""
    if not stored_name:
        return False
    path = resolve_attachment_path(stored_name)
    try:
        path.unlink()
    except FileNotFoundError:
        return False
    except OSError as e:
        logger.warning("Could not remove attachment %s: %s", path, e)
        return False
    logger.info("Removed attachment %s", stored_name)
    return True

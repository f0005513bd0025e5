"""Local disk storage for uploaded images (covers, comic pages, avatars).

Swap this module to move uploads to object storage.
"""

import os
import uuid
from pathlib import Path

UPLOAD_URL_PREFIX = "/uploads/"


def _uuid_filename(original: str | None) -> str:
    """Return a UUID-based filename preserving the original extension."""
    ext = Path(original).suffix.lower() if original else ""
    return f"{uuid.uuid4().hex}{ext}"


def save_upload(content: bytes, original_filename: str | None, upload_dir: str) -> tuple[str, str]:
    """Write *content* to *upload_dir* with a UUID filename.

    Returns:
        (stored_filename, full_path)
    """
    os.makedirs(upload_dir, exist_ok=True)
    stored = _uuid_filename(original_filename)
    full_path = os.path.join(upload_dir, stored)
    with open(full_path, "wb") as fh:
        fh.write(content)
    return stored, full_path


def delete_upload(url: str, upload_dir: str) -> None:
    """Delete a previously uploaded file given its public URL.

    URLs outside /uploads/ (external links) are left alone, as are
    missing files.
    """
    if not url.startswith(UPLOAD_URL_PREFIX):
        return
    filename = os.path.basename(url[len(UPLOAD_URL_PREFIX):])
    try:
        os.remove(os.path.join(upload_dir, filename))
    except FileNotFoundError:
        pass

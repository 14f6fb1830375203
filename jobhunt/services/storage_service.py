"""
Local-disk blob store for uploaded files.

Files land under ``UPLOAD_DIR/<kind>/`` and are served by main.py from the
``/uploads`` static mount.
"""
import logging
import re
import uuid
from pathlib import Path

from jobhunt.core import config
from jobhunt.core.errors import ValidationError

logger = logging.getLogger(__name__)

ALLOWED_KINDS = ("resume", "logo", "profile")
MAX_UPLOAD_BYTES = 5 * 1024 * 1024  # 5MB
_UNSAFE_CHARS = re.compile(r"[^A-Za-z0-9._-]+")


def safe_filename(filename: str) -> str:
    name = Path(filename or "").name
    name = _UNSAFE_CHARS.sub("_", name).strip("._")
    return name or "upload"


def save_upload(data: bytes, filename: str, kind: str) -> str:
    """
    Store raw bytes and return their public URL.

    Raises:
        ValidationError: empty file, unknown kind or file too large
    """
    if kind not in ALLOWED_KINDS:
        raise ValidationError(f"Unsupported upload kind: {kind}.")
    if not data:
        raise ValidationError("Uploaded file is empty.", fields=["file"])
    if len(data) > MAX_UPLOAD_BYTES:
        raise ValidationError("Uploaded file exceeds the 5MB limit.", fields=["file"])

    target_dir = Path(config.UPLOAD_DIR) / kind
    target_dir.mkdir(parents=True, exist_ok=True)

    stored_name = f"{uuid.uuid4().hex}_{safe_filename(filename)}"
    (target_dir / stored_name).write_bytes(data)

    url = f"{config.PUBLIC_BASE_URL.rstrip('/')}/uploads/{kind}/{stored_name}"
    logger.info(f"Upload stored: kind={kind}, bytes={len(data)}, name={stored_name}")
    return url

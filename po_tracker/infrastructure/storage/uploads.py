"""
Local disk storage for step attachments.

Files land in UPLOAD_DIR as "<epoch-ms>_<sanitized-original-name>" and are
served back by the /uploads static mount. No type, size or content checks.
"""
import logging
import re
import shutil
from datetime import datetime
from pathlib import Path
from typing import BinaryIO

from po_tracker.utils.clock import epoch_ms


logger = logging.getLogger(__name__)

UPLOADS_URL_PREFIX = "/uploads"

_UNSAFE_CHARS_RE = re.compile(r"[^\w.\- ]+", re.ASCII)


def sanitize_filename(name: str) -> str:
    """Replace runs of characters outside [A-Za-z0-9_.- ] with '_'."""
    return _UNSAFE_CHARS_RE.sub("_", name or "")


def stored_filename(original_name: str, now: datetime) -> str:
    return f"{epoch_ms(now)}_{sanitize_filename(original_name)}"


def ensure_upload_dir(upload_dir: str | Path) -> Path:
    path = Path(upload_dir)
    if not path.exists():
        path.mkdir(parents=True, exist_ok=True)
        logger.info("Created upload folder %s", path)
    return path


def _open_new_file(directory: Path, name: str):
    """
    Create name in directory without touching an existing file.

    Same-millisecond uploads of the same name get a counter after the
    timestamp: "<ms>_1_<name>", "<ms>_2_<name>", ...
    """
    candidate = name
    n = 0
    while True:
        try:
            return candidate, open(directory / candidate, "xb")
        except FileExistsError:
            n += 1
            prefix, _, rest = name.partition("_")
            candidate = f"{prefix}_{n}_{rest}"


def save_upload(upload_dir: str | Path, original_name: str, source: BinaryIO, now: datetime) -> str:
    """
    Copy an uploaded stream to disk. Existing files are never overwritten.

    Returns:
        Public path of the stored file, e.g. "/uploads/1767225600000_quote.pdf"
    """
    directory = ensure_upload_dir(upload_dir)
    name, out = _open_new_file(directory, stored_filename(original_name, now))
    with out:
        shutil.copyfileobj(source, out)
    logger.info("Stored upload %s (%s)", name, original_name)
    return f"{UPLOADS_URL_PREFIX}/{name}"


def delete_upload(upload_dir: str | Path, public_path: str) -> None:
    """Remove a file stored by save_upload (no-op when it is already gone)."""
    name = public_path.rsplit("/", 1)[-1]
    (Path(upload_dir) / name).unlink(missing_ok=True)
    logger.info("Removed upload %s", name)

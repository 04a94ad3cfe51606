from __future__ import annotations

import logging
import os
import posixpath
import time
from typing import Iterable, Optional

from werkzeug.datastructures import FileStorage
from werkzeug.utils import secure_filename

from eventreg import config
from eventreg.errors import FileTooLargeError, InvalidFileTypeError

logger = logging.getLogger(__name__)


def _size(file: FileStorage) -> int:
    stream = file.stream
    pos = stream.tell()
    stream.seek(0, os.SEEK_END)
    size = stream.tell()
    stream.seek(pos)
    return size


def _unique_name(file: FileStorage, field_name: str) -> str:
    """<base>-<epoch ms><ext>; base falls back to the form field name."""
    base, ext = os.path.splitext(file.filename or "")
    base = secure_filename(base) or field_name
    ext = secure_filename(ext)
    ext = f".{ext}" if ext else ""
    return f"{base}-{int(time.time() * 1000)}{ext}"


def has_file(file: Optional[FileStorage]) -> bool:
    return file is not None and bool(file.filename)


def accept(
    file: FileStorage,
    upload_dir: str,
    max_bytes: int = config.MAX_UPLOAD_BYTES,
    allowed_types: Iterable[str] = config.ALLOWED_IMAGE_TYPES,
    field_name: str = config.UPLOAD_FIELD,
) -> str:
    """
    Validate and store one uploaded image.
    Returns the stored file's path relative to the upload root's parent,
    e.g. "uploads/idPhoto-1700000000000.png".
    """
    if file.mimetype not in tuple(allowed_types):
        logger.info("Rejected upload %r: type %s", file.filename, file.mimetype)
        raise InvalidFileTypeError(details={"mimetype": file.mimetype})

    size = _size(file)
    if size > max_bytes:
        logger.info("Rejected upload %r: %d bytes", file.filename, size)
        raise FileTooLargeError(
            f"File too large (max {max_bytes // (1024 * 1024)}MB)",
            details={"size": size, "limit": max_bytes},
        )

    os.makedirs(upload_dir, exist_ok=True)
    name = _unique_name(file, field_name)
    file.save(os.path.join(upload_dir, name))
    logger.info("Stored upload %s (%d bytes)", name, size)
    return posixpath.join(os.path.basename(os.path.normpath(upload_dir)), name)


def discard(stored_path: str, upload_dir: str) -> None:
    """Remove a file previously returned by accept()."""
    path = os.path.join(upload_dir, posixpath.basename(stored_path))
    try:
        os.remove(path)
    except FileNotFoundError:
        return
    except OSError as e:
        logger.warning("Could not remove orphaned upload %s: %s", path, e)

"""
Reading user-supplied GRIB2 files from local storage.
"""

import logging
from pathlib import Path
from typing import Union

from .constants import ALLOWED_EXTENSIONS, MAX_UPLOAD_MB
from .errors import UploadError

logger = logging.getLogger(__name__)


def extension_ok(filename: str) -> bool:
    name = Path(filename).name.lower()
    return any(name.endswith(ext) for ext in ALLOWED_EXTENSIONS)


def max_size_ok(size_bytes: int, max_mb: float = MAX_UPLOAD_MB) -> bool:
    return size_bytes <= max_mb * 1024 * 1024


def read_upload(path: Union[str, Path], *, max_mb: float = MAX_UPLOAD_MB) -> bytes:
    """
    Read a local GRIB2 file (optionally gzip-wrapped) into memory.

    Parameters
    ----------
    path : str or Path
        File to read
    max_mb : float, optional
        Size limit in megabytes (default: 100)

    Returns
    -------
    bytes
        The raw file content, ready for ``grib_decoder.decode``

    Raises
    ------
    UploadError
        If the file is missing, has an unexpected extension, or is too large.
    """
    path = Path(path)
    if not path.is_file():
        raise UploadError(f"File not found: {path}")
    if not extension_ok(path.name):
        raise UploadError(
            f"Unsupported file extension for {path.name}; expected one of {', '.join(ALLOWED_EXTENSIONS)}"
        )

    size = path.stat().st_size
    if not max_size_ok(size, max_mb):
        raise UploadError(f"{path.name} is {size / 1e6:.1f} MB, limit is {max_mb} MB")

    content = path.read_bytes()
    logger.info(f"Read upload {path.name} ({len(content):,} bytes)")
    return content

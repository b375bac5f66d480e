"""
Download of the latest MRMS reflectivity message with retry and backoff.
"""

import logging
import time
from dataclasses import dataclass
from typing import Callable, Optional

import requests
from cachetools import TTLCache

from .constants import (
    BACKOFF_BASE_S,
    BACKOFF_CAP_S,
    DOWNLOAD_CACHE_BYTES,
    DOWNLOAD_CACHE_TTL_S,
    DEFAULT_REGION,
    LATEST_FILE_NAME,
    MAX_RETRIES,
    MRMS_REGIONS,
    REQUEST_HEADERS,
    REQUEST_TIMEOUT_S,
)
from .errors import RadarFetchError

logger = logging.getLogger(__name__)


@dataclass
class RadarDownload:
    """
    A downloaded raw buffer and the HTTP metadata that came with it.

    Attributes
    ----------
    content : bytes
        Raw (usually gzip-wrapped) GRIB2 message
    url : str
        Source URL
    attempt : int
        1-based attempt that succeeded
    last_modified, etag : str, optional
        Caching headers passed through from the server
    content_length : int, optional
        Length announced by the server, if any
    """

    content: bytes
    url: str
    attempt: int = 1
    last_modified: Optional[str] = None
    etag: Optional[str] = None
    content_length: Optional[int] = None

    def __len__(self) -> int:
        return len(self.content)


def _nbytes_download(download: RadarDownload) -> int:
    """Byte size of a cached download."""
    return len(download.content)


# Downloads keyed by (url, last_modified), 64 MB / 2 minutes
DOWNLOAD_CACHE = TTLCache(maxsize=DOWNLOAD_CACHE_BYTES, ttl=DOWNLOAD_CACHE_TTL_S,
                          getsizeof=_nbytes_download)


def latest_url(
    base_url: Optional[str] = None,
    file_name: str = LATEST_FILE_NAME,
    region: str = DEFAULT_REGION
) -> str:
    """
    Build the URL of the rolling latest file.

    Parameters
    ----------
    base_url : str, optional
        Product directory; overrides ``region`` when given
    file_name : str, optional
        Latest file name within the directory
    region : str, optional
        Key of ``MRMS_REGIONS`` (default: 'CONUS')

    Raises
    ------
    ValueError
        If ``region`` is unknown and no ``base_url`` is given
    """
    if base_url is None:
        key = region.upper()
        if key not in MRMS_REGIONS:
            raise ValueError(f"Unknown MRMS region '{region}'. Valid options: {', '.join(MRMS_REGIONS)}")
        base_url = MRMS_REGIONS[key]
    return f"{base_url.rstrip('/')}/{file_name}"


def backoff_delay(attempt: int, base: float = BACKOFF_BASE_S, cap: float = BACKOFF_CAP_S) -> float:
    """Exponential backoff in seconds after failed ``attempt`` (1-based)."""
    return min(base * 2 ** (attempt - 1), cap)


def _int_or_none(value) -> Optional[int]:
    try:
        return int(value)
    except (TypeError, ValueError):
        return None


def head_latest_radar(
    url: Optional[str] = None,
    *,
    session: Optional[requests.Session] = None,
    timeout: float = REQUEST_TIMEOUT_S
) -> dict:
    """
    Fetch metadata of the latest file without downloading it.

    Returns
    -------
    dict
        Keys: url, content_length, last_modified, etag

    Raises
    ------
    RadarFetchError
        On a transport error or non-2xx status.
    """
    url = url or latest_url()
    http = session or requests
    try:
        response = http.head(url, headers={"User-Agent": REQUEST_HEADERS["User-Agent"]},
                             timeout=timeout)
    except requests.RequestException as exc:
        raise RadarFetchError(f"HEAD {url} failed: {exc}", attempts=1) from exc

    if not response.ok:
        raise RadarFetchError(f"HEAD {url} returned {response.status_code}",
                              status=response.status_code, attempts=1)

    return {
        "url": url,
        "content_length": _int_or_none(response.headers.get("Content-Length")),
        "last_modified": response.headers.get("Last-Modified"),
        "etag": response.headers.get("ETag"),
    }


def fetch_latest_radar(
    url: Optional[str] = None,
    *,
    session: Optional[requests.Session] = None,
    max_retries: int = MAX_RETRIES,
    timeout: float = REQUEST_TIMEOUT_S,
    sleep: Callable[[float], None] = time.sleep,
    cache: Optional[TTLCache] = None
) -> RadarDownload:
    """
    Download the latest reflectivity message.

    Parameters
    ----------
    url : str, optional
        File URL (default: CONUS latest file)
    session : requests.Session, optional
        Session to issue requests with (default: module-level ``requests``)
    max_retries : int, optional
        Total attempts before giving up (default: 3)
    timeout : float, optional
        Per-request timeout in seconds (default: 30)
    sleep : callable, optional
        Used to wait between attempts; injectable for tests
    cache : TTLCache, optional
        When given (e.g. ``DOWNLOAD_CACHE``), a HEAD probe provides the
        Last-Modified stamp and an unchanged file is served from the cache.

    Returns
    -------
    RadarDownload

    Raises
    ------
    RadarFetchError
        When every attempt failed. ``status`` holds the last HTTP status, if
        a response was received at all.
    """
    if max_retries < 1:
        raise ValueError(f"max_retries must be at least 1, got {max_retries}")

    url = url or latest_url()
    http = session or requests

    cache_key = None
    if cache is not None:
        try:
            meta = head_latest_radar(url, session=session, timeout=timeout)
        except RadarFetchError as exc:
            logger.warning(f"Metadata probe failed, bypassing cache: {exc}")
        else:
            cache_key = (url, meta["last_modified"])
            cached = cache.get(cache_key)
            if cached is not None:
                logger.info(f"Serving {url} from cache ({len(cached):,} bytes)")
                return cached

    last_status = None
    last_error = None
    for attempt in range(1, max_retries + 1):
        logger.info(f"Attempt {attempt}/{max_retries} to download radar data from {url}")
        try:
            response = http.get(url, headers=REQUEST_HEADERS, timeout=timeout)
        except requests.RequestException as exc:
            last_error = exc
            logger.error(f"Attempt {attempt} failed: {exc}")
        else:
            if response.ok:
                download = RadarDownload(
                    content=response.content,
                    url=url,
                    attempt=attempt,
                    last_modified=response.headers.get("Last-Modified"),
                    etag=response.headers.get("ETag"),
                    content_length=_int_or_none(response.headers.get("Content-Length")),
                )
                logger.info(f"Fetched radar data: {len(download):,} bytes")
                if cache_key is not None and len(download) <= cache.maxsize:
                    cache[cache_key] = download
                return download

            last_status = response.status_code
            last_error = None
            logger.error(f"Failed to fetch radar data: {response.status_code} {response.reason}")

        if attempt < max_retries:
            delay = backoff_delay(attempt)
            logger.info(f"Waiting {delay:.1f}s before retry...")
            sleep(delay)

    message = f"All {max_retries} attempts to fetch {url} failed"
    if last_status is not None:
        message += f" (last status {last_status})"
    if last_error is not None:
        raise RadarFetchError(f"{message}: {last_error}", status=last_status,
                              attempts=max_retries) from last_error
    raise RadarFetchError(message, status=last_status, attempts=max_retries)

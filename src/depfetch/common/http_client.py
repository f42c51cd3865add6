"""HTTP helpers used by engines that fetch from remote repositories.

Encapsulates timeout, retry and partial-download handling so callers only
deal with "fetched", "not found" or an exception.
"""
from __future__ import annotations

import logging
import os
import time
from typing import Any, Dict, Optional

import requests

from depfetch.constants import Constants
from depfetch.common.logging_utils import extra_context, is_debug_enabled, safe_url, Timer

logger = logging.getLogger(__name__)


class DownloadError(IOError):
    """Raised when a remote resource could not be fetched after retries."""


def download(
    url: str,
    dest: str,
    *,
    headers: Optional[Dict[str, str]] = None,
    **kwargs: Any
) -> bool:
    """Download ``url`` into ``dest`` with timeout and retries.

    Args:
        url: Source URL.
        dest: Target file path; parent directories are created.
        headers: Optional request headers.
        **kwargs: Additional requests.get parameters.

    Returns:
        True when the file was written, False when the server answered 404.

    Raises:
        DownloadError: on any other status or after all retries failed.
    """
    safe_target = safe_url(url)
    last_exception: Optional[str] = None

    for attempt in range(Constants.HTTP_RETRY_MAX):
        if attempt:
            time.sleep(Constants.HTTP_RETRY_BASE_DELAY_SEC * (2 ** (attempt - 1)))
        with Timer() as t:
            if is_debug_enabled(logger):
                logger.debug(
                    "HTTP request",
                    extra=extra_context(
                        event="http_request",
                        component="http_client",
                        action="GET",
                        target=safe_target,
                        attempt=attempt + 1
                    )
                )
            try:
                response = requests.get(
                    url,
                    timeout=Constants.REQUEST_TIMEOUT,
                    headers=headers,
                    stream=True,
                    **kwargs
                )
            except requests.RequestException as exc:  # includes Timeout
                last_exception = str(exc)
                if is_debug_enabled(logger):
                    logger.debug(
                        "HTTP request exception",
                        extra=extra_context(
                            event="http_exception",
                            component="http_client",
                            action="GET",
                            outcome="request_exception",
                            attempt=attempt + 1,
                            target=safe_target
                        )
                    )
                continue

            with response:
                if response.status_code == 404:
                    return False
                if response.status_code >= 500:
                    last_exception = f"HTTP {response.status_code}"
                    continue
                if response.status_code != 200:
                    raise DownloadError(f"GET {safe_target} returned HTTP {response.status_code}")
                try:
                    _write_body(response, dest)
                except requests.RequestException as exc:
                    last_exception = str(exc)
                    continue

            if is_debug_enabled(logger):
                logger.debug(
                    "HTTP download ok",
                    extra=extra_context(
                        event="http_response",
                        component="http_client",
                        action="GET",
                        outcome="success",
                        status_code=response.status_code,
                        duration_ms=t.duration_ms(),
                        target=safe_target
                    )
                )
            return True

    raise DownloadError(
        f"GET {safe_target} failed after {Constants.HTTP_RETRY_MAX} attempts: {last_exception}"
    )


def _write_body(response: requests.Response, dest: str) -> None:
    """Stream the body to a sibling temp file, then move it into place."""
    parent = os.path.dirname(dest)
    if parent:
        os.makedirs(parent, exist_ok=True)
    partial = dest + ".part"
    try:
        with open(partial, "wb") as fh:
            for chunk in response.iter_content(chunk_size=Constants.DOWNLOAD_CHUNK_SIZE):
                if chunk:
                    fh.write(chunk)
        os.replace(partial, dest)
    finally:
        if os.path.exists(partial):
            os.remove(partial)

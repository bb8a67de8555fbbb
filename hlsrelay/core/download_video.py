"""
Source video download over HTTP(S) via requests.
"""

import logging
import threading
import time
from pathlib import Path

import requests
import urllib3

from hlsrelay.core.error_codes import JobError
from hlsrelay.core.models import DownloadedAsset
from hlsrelay.core.constants import (
    ErrorCode, DOWNLOAD_TIMEOUT_SEC, DOWNLOAD_CHUNK_BYTES, BROWSER_USER_AGENT,
)

logger = logging.getLogger(__name__)


def _remove_partial(path: Path):
    try:
        path.unlink(missing_ok=True)
    except OSError as e:
        logger.error("Failed to remove partial download %s: %s", path, e)


def _deadline_error(timeout: int) -> JobError:
    return JobError(ErrorCode.DOWNLOAD_FAILED, f"Failed to download video: exceeded {timeout}s")


def fetch(url: str, destination: Path,
          timeout: int = DOWNLOAD_TIMEOUT_SEC,
          verify_tls: bool = False,
          user_agent: str = BROWSER_USER_AGENT) -> DownloadedAsset:
    """
    Stream url into destination, following redirects.

    The whole transfer must finish within `timeout` seconds.  Succeeds only
    on HTTP 200 with a non-empty body; on any failure the partial file is
    removed and JobError(DOWNLOAD_FAILED) is raised.  No retries.
    """
    if not verify_tls:
        # Parity with the legacy service; certificate checks stay off until
        # the deployment owner turns verifyTls on.
        logger.warning("TLS certificate verification is disabled for %s", url)
        urllib3.disable_warnings(urllib3.exceptions.InsecureRequestWarning)

    try:
        out = open(destination, 'xb')
    except FileExistsError:
        raise JobError(ErrorCode.IO_FAILURE, f"Download target already exists: {destination}")
    except OSError as e:
        raise JobError(ErrorCode.IO_FAILURE, f"Cannot open download target {destination}: {e}")

    deadline = time.monotonic() + timeout
    try:
        with out:
            try:
                resp = requests.get(
                    url,
                    headers={"User-Agent": user_agent},
                    stream=True,
                    allow_redirects=True,
                    verify=verify_tls,
                    timeout=timeout,
                )
            except requests.exceptions.Timeout:
                raise JobError(ErrorCode.DOWNLOAD_FAILED, "Failed to download video: request timed out")
            except requests.exceptions.RequestException as e:
                raise JobError(ErrorCode.DOWNLOAD_FAILED, f"Failed to download video: {e}")

            # A chunk read blocks until the whole chunk arrives, so the
            # deadline is also enforced by shutting the socket from a timer.
            expired = threading.Event()

            def _expire():
                expired.set()
                try:
                    resp.raw.shutdown()
                except (OSError, ValueError) as e:
                    logger.debug("Socket shutdown after deadline failed: %s", e)

            watchdog = threading.Timer(max(deadline - time.monotonic(), 0), _expire)
            watchdog.daemon = True
            watchdog.start()
            try:
                if resp.status_code != 200:
                    raise JobError(ErrorCode.DOWNLOAD_FAILED,
                                   f"Failed to download video: HTTP {resp.status_code}")

                for chunk in resp.iter_content(chunk_size=DOWNLOAD_CHUNK_BYTES):
                    if expired.is_set() or time.monotonic() > deadline:
                        break
                    if chunk:
                        out.write(chunk)
                if expired.is_set() or time.monotonic() > deadline:
                    raise _deadline_error(timeout)
            except JobError:
                raise
            except Exception as e:
                # A read cut off by the timer surfaces as a transport error
                if expired.is_set():
                    raise _deadline_error(timeout)
                if isinstance(e, requests.exceptions.RequestException):
                    raise JobError(ErrorCode.DOWNLOAD_FAILED, f"Failed to download video: {e}")
                raise
            finally:
                watchdog.cancel()
                resp.close()
    except JobError:
        _remove_partial(destination)
        raise
    except OSError as e:
        _remove_partial(destination)
        raise JobError(ErrorCode.DOWNLOAD_FAILED, f"Failed to write download: {e}")
    except Exception:
        _remove_partial(destination)
        raise

    size = destination.stat().st_size if destination.exists() else 0
    if size == 0:
        _remove_partial(destination)
        raise JobError(ErrorCode.DOWNLOAD_FAILED, "Failed to download video: empty response")

    logger.info("Downloaded %d bytes to %s", size, destination)
    return DownloadedAsset(path=destination, size=size)

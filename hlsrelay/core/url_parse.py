"""
Source URL validation and extension resolution.
"""

import re
from pathlib import PurePosixPath
from urllib.parse import urlparse, unquote

from hlsrelay.core.constants import ALLOWED_URL_SCHEMES, DEFAULT_EXTENSION
from hlsrelay.core.error_codes import invalid_input

_EXTENSION_RE = re.compile(r'^[A-Za-z0-9]{1,8}$')


def is_valid_video_url(url) -> bool:
    """
    Absolute URL check: known scheme, a host, no embedded whitespace.
    """
    if not isinstance(url, str):
        return False
    url = url.strip()
    if not url or re.search(r'\s', url):
        return False
    try:
        parsed = urlparse(url)
        # .port raises ValueError on garbage like "host:abc"
        parsed.port
    except ValueError:
        return False
    if parsed.scheme.lower() not in ALLOWED_URL_SCHEMES:
        return False
    return bool(parsed.hostname)


def validate_video_url(url) -> str:
    """
    Validate a source URL and return it stripped.
    Raises JobError(INVALID_INPUT) if malformed.
    """
    if not is_valid_video_url(url):
        raise invalid_input("Invalid video URL")
    return url.strip()


def extension_from_url(url: str) -> str:
    """
    File extension taken from the URL path, 'mp4' when absent.
    Advisory only; the content is never sniffed.
    """
    path = unquote(urlparse(url).path or "")
    if not path or path.endswith("/"):
        return DEFAULT_EXTENSION
    suffix = PurePosixPath(path).suffix.lstrip('.')
    if suffix and _EXTENSION_RE.match(suffix):
        return suffix
    return DEFAULT_EXTENSION

"""
Processor configuration.
Loads settings from a JSON file and freezes them into an immutable value
that is handed to each component at construction.
"""

import json
import logging
from dataclasses import dataclass, field
from pathlib import Path

from hlsrelay.core.constants import (
    DEFAULT_CONFIG_PATH, DEFAULT_RAW_DIR, DEFAULT_HLS_DIR, DEFAULT_LOG_PATH,
    DEFAULT_PUBLIC_HLS_BASE_URL, DEFAULT_FFMPEG_BINARY, DEFAULT_RENDITIONS,
    HLS_SEGMENT_SEC, HLS_LIST_SIZE, MAX_RETENTION_AGE_DAYS,
    ENCODER_TIMEOUT_SEC, DOWNLOAD_TIMEOUT_SEC,
)

# Validation bounds
_SEGMENT_MIN = 1
_SEGMENT_MAX = 60
_TIMEOUT_MIN = 10
_TIMEOUT_MAX = 24 * 3600
_HEIGHT_MIN = 16
_HEIGHT_MAX = 4320

logger = logging.getLogger(__name__)

# camelCase key -> attribute name
_KEY_ALIASES = {
    'rawDir': 'raw_dir',
    'hlsDir': 'hls_dir',
    'logPath': 'log_path',
    'publicHlsBaseUrl': 'public_hls_base_url',
    'encoderBinaryPath': 'encoder_binary_path',
    'ffprobeBinaryPath': 'ffprobe_binary_path',
    'segmentDurationSeconds': 'segment_duration_seconds',
    'maxPlaylistSegments': 'max_playlist_segments',
    'deleteOriginalOnSuccess': 'delete_original_on_success',
    'maxRetentionAgeDays': 'max_retention_age_days',
    'verboseLogging': 'verbose_logging',
    'encoderTimeoutSeconds': 'encoder_timeout_seconds',
    'downloadTimeoutSeconds': 'download_timeout_seconds',
    'verifyTls': 'verify_tls',
    'renditions': 'renditions',
}


@dataclass(frozen=True)
class Rendition:
    """One quality variant. Position in the ladder is its stream index."""
    height: int
    bitrate: str
    maxrate: str
    bufsize: str

    @property
    def label(self) -> str:
        return f"{self.height}p"


@dataclass(frozen=True)
class HlsOptions:
    segment_duration: int = HLS_SEGMENT_SEC
    list_size: int = HLS_LIST_SIZE


def default_renditions() -> tuple[Rendition, ...]:
    return tuple(Rendition(h, b, m, s) for h, b, m, s in DEFAULT_RENDITIONS)


@dataclass(frozen=True)
class ProcessorConfig:
    raw_dir: Path = DEFAULT_RAW_DIR
    hls_dir: Path = DEFAULT_HLS_DIR
    log_path: Path = DEFAULT_LOG_PATH
    public_hls_base_url: str = DEFAULT_PUBLIC_HLS_BASE_URL
    encoder_binary_path: str = DEFAULT_FFMPEG_BINARY
    ffprobe_binary_path: str | None = None
    segment_duration_seconds: int = HLS_SEGMENT_SEC
    max_playlist_segments: int = HLS_LIST_SIZE
    delete_original_on_success: bool = False
    max_retention_age_days: int = MAX_RETENTION_AGE_DAYS
    verbose_logging: bool = True
    encoder_timeout_seconds: int = ENCODER_TIMEOUT_SEC
    download_timeout_seconds: int = DOWNLOAD_TIMEOUT_SEC
    verify_tls: bool = False
    renditions: tuple[Rendition, ...] = field(default_factory=default_renditions)

    @classmethod
    def from_dict(cls, data: dict) -> 'ProcessorConfig':
        """Build a config from a mapping of camelCase or snake_case keys."""
        values = {}
        for key, value in (data or {}).items():
            attr = _KEY_ALIASES.get(key, key)
            if attr not in cls.__dataclass_fields__:
                logger.warning("Ignoring unknown config key %r", key)
                continue
            values[attr] = _validate(attr, value)
        return cls(**values)

    @property
    def hls_options(self) -> HlsOptions:
        return HlsOptions(segment_duration=self.segment_duration_seconds,
                          list_size=self.max_playlist_segments)

    @property
    def ffprobe_binary(self) -> str:
        """ffprobe path; defaults to the sibling of the encoder binary."""
        if self.ffprobe_binary_path:
            return self.ffprobe_binary_path
        encoder = Path(self.encoder_binary_path)
        if encoder.parent == Path('.'):
            return "ffprobe"
        return str(encoder.with_name("ffprobe"))

    def public_url_for(self, public_path: str) -> str:
        return f"{self.public_hls_base_url.rstrip('/')}/{public_path}"


def _as_int(key: str, value, default: int, low: int | None = None,
            high: int | None = None) -> int:
    try:
        value = int(value)
    except (TypeError, ValueError):
        logger.warning("Invalid %s %r — using default", key, value)
        return default
    if low is not None:
        value = max(low, value)
    if high is not None:
        value = min(high, value)
    return value


def _parse_rendition(entry) -> Rendition:
    if isinstance(entry, dict):
        height = int(entry['height'])
        bitrate, maxrate, bufsize = entry['bitrate'], entry['maxrate'], entry['bufsize']
    else:
        height, bitrate, maxrate, bufsize = entry
        height = int(height)
    if not _HEIGHT_MIN <= height <= _HEIGHT_MAX:
        raise ValueError(f"height out of range: {height}")
    return Rendition(height, str(bitrate), str(maxrate), str(bufsize))


def _validate(key: str, value):
    """Validate and coerce config values to safe ranges."""
    if key in ('raw_dir', 'hls_dir', 'log_path'):
        return Path(value).expanduser()

    if key == 'segment_duration_seconds':
        return _as_int(key, value, HLS_SEGMENT_SEC, _SEGMENT_MIN, _SEGMENT_MAX)

    if key == 'max_playlist_segments':
        return _as_int(key, value, HLS_LIST_SIZE, 0)

    if key == 'max_retention_age_days':
        # negative means the same as 0: retain forever
        return _as_int(key, value, MAX_RETENTION_AGE_DAYS, 0)

    if key == 'encoder_timeout_seconds':
        return _as_int(key, value, ENCODER_TIMEOUT_SEC, _TIMEOUT_MIN, _TIMEOUT_MAX)

    if key == 'download_timeout_seconds':
        return _as_int(key, value, DOWNLOAD_TIMEOUT_SEC, _TIMEOUT_MIN, _TIMEOUT_MAX)

    if key in ('delete_original_on_success', 'verbose_logging', 'verify_tls'):
        return bool(value)

    if key == 'renditions':
        try:
            ladder = tuple(_parse_rendition(entry) for entry in value)
        except (TypeError, ValueError, KeyError) as e:
            logger.warning("Invalid renditions (%s) — using default ladder", e)
            return default_renditions()
        if not ladder:
            logger.warning("Empty renditions — using default ladder")
            return default_renditions()
        return ladder

    if key == 'ffprobe_binary_path':
        return str(value) if value else None

    if key == 'public_hls_base_url':
        return str(value) if value else DEFAULT_PUBLIC_HLS_BASE_URL

    if key == 'encoder_binary_path':
        return str(value) if value else DEFAULT_FFMPEG_BINARY

    return value


def load_config(path: Path | None = None) -> ProcessorConfig:
    """Load config from disk; missing or unreadable files yield defaults."""
    path = path or DEFAULT_CONFIG_PATH
    saved: dict = {}
    if path.exists():
        try:
            with open(path, 'r') as f:
                saved = json.load(f)
        except Exception as e:
            logger.warning("Failed to load config: %s", e)
            saved = {}
    if not isinstance(saved, dict):
        logger.warning("Config file %s is not a JSON object — using defaults", path)
        saved = {}
    return ProcessorConfig.from_dict(saved)

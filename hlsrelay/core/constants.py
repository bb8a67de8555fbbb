"""
Shared constants for HLSRelay.
Single source of truth — imported by every other module.
"""

import pathlib

# ── Application identity ──────────────────────────────────────────────
APP_NAME = "HLSRelay"
APP_VERSION = "1.0.0"
LOGGER_NAME = "hlsrelay"

# ── Filesystem defaults (relative to the working directory) ──────────
DEFAULT_RAW_DIR = pathlib.Path("videos")
DEFAULT_HLS_DIR = pathlib.Path("hls")
DEFAULT_LOG_PATH = pathlib.Path("logs") / "api.log"
DEFAULT_CONFIG_PATH = pathlib.Path("hlsrelay.json")

DEFAULT_PUBLIC_HLS_BASE_URL = "http://localhost/hls"

# ── Job stages (ordered) ──────────────────────────────────────────────
class JobStage:
    CREATED = "CREATED"
    VALIDATING = "VALIDATING"
    DOWNLOADING = "DOWNLOADING"
    TRANSCODING = "TRANSCODING"
    CLEANING_UP = "CLEANING_UP"
    SUCCEEDED = "SUCCEEDED"
    FAILED = "FAILED"

# ── Result status values ──────────────────────────────────────────────
class ResultStatus:
    SUCCESS = "success"
    ERROR = "error"

# ── Error codes ───────────────────────────────────────────────────────
class ErrorCode:
    INVALID_INPUT = "ERR_INVALID_INPUT"
    DOWNLOAD_FAILED = "ERR_DOWNLOAD_FAILED"
    TRANSCODE_FAILED = "ERR_TRANSCODE_FAILED"
    IO_FAILURE = "ERR_IO_FAILURE"

# ── Download ──────────────────────────────────────────────────────────
DOWNLOAD_TIMEOUT_SEC = 300
DOWNLOAD_CHUNK_BYTES = 1024 * 1024
DEFAULT_EXTENSION = "mp4"
BROWSER_USER_AGENT = (
    "Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36"
)

# ── Encoder ───────────────────────────────────────────────────────────
DEFAULT_FFMPEG_BINARY = "ffmpeg"
ENCODER_TIMEOUT_SEC = 600
PROBE_TIMEOUT_SEC = 30

VIDEO_CODEC = "libx264"
VIDEO_PRESET = "faster"
AUDIO_CODEC = "aac"
AUDIO_BITRATE = "64k"
AUDIO_SAMPLE_RATE = 44100
SCALE_FLAGS = "lanczos"

# ── HLS layout ────────────────────────────────────────────────────────
MASTER_PLAYLIST_NAME = "master.m3u8"
VARIANT_PLAYLIST_TEMPLATE = "stream_%v.m3u8"
SEGMENT_TEMPLATE = "stream_%v_%03d.ts"
HLS_SEGMENT_SEC = 6
HLS_LIST_SIZE = 0              # 0 = keep every segment (VOD)

# Default rendition ladder: (height, bitrate, maxrate, bufsize)
DEFAULT_RENDITIONS = (
    (240, "200k", "250k", "400k"),
    (360, "350k", "400k", "700k"),
    (480, "500k", "600k", "1000k"),
)

# ── Retention ─────────────────────────────────────────────────────────
MAX_RETENTION_AGE_DAYS = 30    # 0 = never purge
SECONDS_PER_DAY = 24 * 60 * 60

# ── Logging ───────────────────────────────────────────────────────────
LOG_FORMAT = "[%(asctime)s] [%(levelname)s] %(message)s"
LOG_DATE_FORMAT = "%Y-%m-%d %H:%M:%S"

# ── Misc ──────────────────────────────────────────────────────────────
VIDEO_ID_PREFIX = "video"
VIDEO_ID_SUFFIX_BYTES = 3
ALLOWED_URL_SCHEMES = ("http", "https", "ftp")

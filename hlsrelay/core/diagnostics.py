"""
Diagnostics: encoder version detection and directory checks.
"""

import os
import logging
from pathlib import Path

from hlsrelay.core.security_utils import run_subprocess_capture

logger = logging.getLogger(__name__)


def get_encoder_version(binary: str) -> str:
    """Return the first line of `<binary> -version`, or an error message."""
    try:
        result = run_subprocess_capture([binary, "-version"], timeout=10)
        if result.returncode == 0:
            lines = result.stdout.strip().splitlines()
            return lines[0] if lines else "Unknown version"
        return f"Error (rc={result.returncode})"
    except FileNotFoundError:
        return "Not installed"
    except Exception as e:
        return f"Error: {e}"


def check_directory(path: Path) -> dict:
    """Report whether a directory exists and is writable."""
    exists = path.is_dir()
    return {
        "path": str(path),
        "exists": exists,
        "writable": exists and os.access(path, os.W_OK),
    }


def get_diagnostics(config) -> dict:
    """Gather all diagnostic information for a ProcessorConfig."""
    info = {
        "ffmpeg_version": get_encoder_version(config.encoder_binary_path),
        "ffprobe_version": get_encoder_version(config.ffprobe_binary),
        "directories": {
            "videos": check_directory(config.raw_dir),
            "hls": check_directory(config.hls_dir),
            "logs": check_directory(config.log_path.parent),
        },
        "tls_verification": config.verify_tls,
        "renditions": [r.label for r in config.renditions],
    }
    if not config.verify_tls:
        logger.warning("TLS certificate verification is disabled for downloads")
    return info

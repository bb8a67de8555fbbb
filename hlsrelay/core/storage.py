"""
Working directory layout: raw downloads, HLS output, log file.
"""

import logging
from pathlib import Path

from hlsrelay.core.error_codes import io_failure
from hlsrelay.core.security_utils import contained_path

logger = logging.getLogger(__name__)


class StoragePaths:
    """Resolves and creates the directories shared by every job."""

    def __init__(self, raw_dir: Path, hls_dir: Path, log_path: Path):
        self.raw_dir = Path(raw_dir)
        self.hls_dir = Path(hls_dir)
        self.log_path = Path(log_path)

    @classmethod
    def from_config(cls, config) -> 'StoragePaths':
        return cls(config.raw_dir, config.hls_dir, config.log_path)

    @property
    def log_dir(self) -> Path:
        return self.log_path.parent

    def ensure(self) -> 'StoragePaths':
        """Create raw, HLS and log directories if they don't exist."""
        for directory in (self.raw_dir, self.hls_dir, self.log_dir):
            try:
                directory.mkdir(parents=True, exist_ok=True)
            except OSError as e:
                raise io_failure(f"Cannot create directory {directory}: {e}")
        return self

    def raw_file(self, video_id: str, extension: str) -> Path:
        try:
            return contained_path(self.raw_dir, f"{video_id}.{extension}")
        except ValueError as e:
            raise io_failure(str(e))

    def hls_output(self, video_id: str) -> Path:
        try:
            return contained_path(self.hls_dir, video_id)
        except ValueError as e:
            raise io_failure(str(e))

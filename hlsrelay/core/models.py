"""
Pipeline data models (plain dataclasses) for HLSRelay.
None of these are persisted; they live for one pipeline run.
"""

import secrets
import time
from dataclasses import dataclass, field
from pathlib import Path
from typing import Optional

from hlsrelay.core.constants import (
    JobStage, ResultStatus, MASTER_PLAYLIST_NAME,
    VIDEO_ID_PREFIX, VIDEO_ID_SUFFIX_BYTES,
)


def generate_video_id(post_id: int, now: float | None = None) -> str:
    """video_<post_id>_<unix seconds>_<random hex>"""
    timestamp = int(now if now is not None else time.time())
    suffix = secrets.token_hex(VIDEO_ID_SUFFIX_BYTES)
    return f"{VIDEO_ID_PREFIX}_{post_id}_{timestamp}_{suffix}"


@dataclass
class Job:
    video_url: str
    post_id: int = 0
    video_id: str = ""
    stage: str = JobStage.CREATED

    def __post_init__(self):
        if not self.video_id:
            self.video_id = generate_video_id(self.post_id)


@dataclass
class DownloadedAsset:
    path: Path
    size: int


@dataclass
class HlsPackage:
    video_id: str
    output_dir: Path
    variant_playlists: list[Path] = field(default_factory=list)
    encoder_output: str = ""

    @property
    def master_playlist(self) -> Path:
        return self.output_dir / MASTER_PLAYLIST_NAME

    @property
    def public_path(self) -> str:
        return f"{self.video_id}/{MASTER_PLAYLIST_NAME}"


@dataclass
class ProcessResult:
    status: str
    message: str
    hls_url: Optional[str] = None
    video_id: Optional[str] = None

    @property
    def ok(self) -> bool:
        return self.status == ResultStatus.SUCCESS

    @classmethod
    def success(cls, hls_url: str, video_id: str) -> 'ProcessResult':
        return cls(ResultStatus.SUCCESS, "Video processed successfully",
                   hls_url=hls_url, video_id=video_id)

    @classmethod
    def error(cls, message: str, video_id: str | None = None) -> 'ProcessResult':
        return cls(ResultStatus.ERROR, message, hls_url=None, video_id=video_id)

    def as_dict(self) -> dict:
        return {
            'status': self.status,
            'message': self.message,
            'hls_url': self.hls_url,
            'video_id': self.video_id,
        }

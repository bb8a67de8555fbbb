"""
Video processor: download -> HLS transcode -> optional original cleanup.
Processes one request synchronously and always returns a ProcessResult.
"""

import logging

from hlsrelay.core.config import ProcessorConfig
from hlsrelay.core.constants import JobStage
from hlsrelay.core.error_codes import JobError
from hlsrelay.core.log_setup import configure_logging
from hlsrelay.core.models import Job, DownloadedAsset, ProcessResult
from hlsrelay.core.storage import StoragePaths
from hlsrelay.core.url_parse import validate_video_url, extension_from_url
from hlsrelay.core.download_video import fetch
from hlsrelay.core.transcode_hls import convert_to_hls
from hlsrelay.core.retention import sweep

logger = logging.getLogger(__name__)


class VideoProcessor:
    """
    Runs the download/transcode/publish pipeline for one request at a time.

    There is no cross-request coordination: concurrent callers each get
    their own encoder process and share the directory roots (and the
    retention sweep) without locking.
    """

    def __init__(self, config: ProcessorConfig | None = None):
        self.config = config or ProcessorConfig()
        self.storage = StoragePaths.from_config(self.config).ensure()
        configure_logging(self.config.log_path, self.config.verbose_logging)

    # ── Pipeline ──────────────────────────────────────────────────────

    def process_video(self, video_url: str, post_id: int = 0) -> ProcessResult:
        """
        Process a video URL: download, convert to HLS, return streaming URL.
        Never raises; failures come back as status "error".
        """
        job = None
        try:
            job = Job(video_url=video_url, post_id=post_id)
            logger.info("Starting video processing for post ID: %s", post_id)
            logger.info("Video URL: %s", video_url)

            self._set_stage(job, JobStage.VALIDATING)
            job.video_url = validate_video_url(video_url)

            self._set_stage(job, JobStage.DOWNLOADING)
            asset = self._download(job)
            logger.info("Video downloaded: %s (%d bytes)", asset.path, asset.size)

            self._set_stage(job, JobStage.TRANSCODING)
            # Raw file stays on disk if this fails
            package = convert_to_hls(
                asset.path,
                self.storage.hls_output(job.video_id),
                self.config.renditions,
                self.config.hls_options,
                ffmpeg_binary=self.config.encoder_binary_path,
                ffprobe_binary=self.config.ffprobe_binary,
                timeout=self.config.encoder_timeout_seconds,
            )
            hls_url = self.config.public_url_for(package.public_path)
            logger.info("HLS conversion completed: %s", hls_url)

            if self.config.delete_original_on_success:
                self._set_stage(job, JobStage.CLEANING_UP)
                self._discard_original(asset)

            self._set_stage(job, JobStage.SUCCEEDED)
            return ProcessResult.success(hls_url, job.video_id)

        except JobError as e:
            return self._fail(job, e.message, e)
        except Exception as e:
            logger.error("Unexpected error processing %s: %s", video_url, e, exc_info=True)
            return self._fail(job, str(e) or type(e).__name__, e)

    def _download(self, job: Job) -> DownloadedAsset:
        destination = self.storage.raw_file(job.video_id, extension_from_url(job.video_url))
        logger.info("Downloading video...")
        return fetch(
            job.video_url,
            destination,
            timeout=self.config.download_timeout_seconds,
            verify_tls=self.config.verify_tls,
        )

    def _discard_original(self, asset: DownloadedAsset):
        """Delete the raw download; failure never demotes a successful job."""
        try:
            asset.path.unlink()
            logger.info("Original video deleted")
        except OSError as e:
            logger.error("Failed to delete original %s: %s", asset.path, e)

    def _set_stage(self, job: Job, stage: str):
        job.stage = stage
        logger.info("[%s] stage -> %s", job.video_id, stage)

    def _fail(self, job: Job | None, message: str, error: Exception) -> ProcessResult:
        if job is None:
            logger.error("Error: %s", message)
            return ProcessResult.error(message)

        failed_stage = job.stage
        job.stage = JobStage.FAILED
        logger.error("[%s] %s failed: %s", job.video_id, failed_stage, message)

        # Already written at INFO by the transcoder when verbose
        output = getattr(error, 'output', None)
        if output and not logger.isEnabledFor(logging.INFO):
            logger.error("Encoder output:\n%s", output)

        # Nothing was written for a rejected request, so no id is reported
        if failed_stage in (JobStage.CREATED, JobStage.VALIDATING):
            return ProcessResult.error(message)
        return ProcessResult.error(message, job.video_id)

    # ── Maintenance ───────────────────────────────────────────────────

    def cleanup_old_videos(self) -> int:
        """Purge artifacts older than max_retention_age_days; returns count."""
        max_age = self.config.max_retention_age_days
        if max_age <= 0:
            logger.info("Cleanup skipped: retention disabled")
            return 0

        deleted = sweep(self.storage.raw_dir, self.storage.hls_dir, max_age)
        logger.info("Cleanup completed: %d items deleted", deleted)
        return deleted

"""
Multi-rendition HLS packaging using ffmpeg.
One encoder run splits the video into N scaled branches and writes a media
playlist per branch plus a master playlist that lists them in ladder order.
"""

import logging
import subprocess
from pathlib import Path

from hlsrelay.core.config import HlsOptions, Rendition
from hlsrelay.core.error_codes import JobError
from hlsrelay.core.models import HlsPackage
from hlsrelay.core.playlist import read_master_variants
from hlsrelay.core.security_utils import run_subprocess_capture, run_subprocess_combined
from hlsrelay.core.constants import (
    ErrorCode, ENCODER_TIMEOUT_SEC, PROBE_TIMEOUT_SEC,
    VIDEO_CODEC, VIDEO_PRESET, AUDIO_CODEC, AUDIO_BITRATE, AUDIO_SAMPLE_RATE,
    SCALE_FLAGS, MASTER_PLAYLIST_NAME, VARIANT_PLAYLIST_TEMPLATE, SEGMENT_TEMPLATE,
)

logger = logging.getLogger(__name__)

# Tail of encoder output kept in error messages
_OUTPUT_TAIL = 300


def has_audio_stream(source: Path, ffprobe_binary: str | None) -> bool:
    """
    True if the source carries at least one audio stream.
    When ffprobe is unavailable or fails, audio is assumed present. The
    `0:a?` maps are optional but `-var_stream_map` still names `a:{i}`, so
    a source with no audio fails to encode unless ffprobe can run.
    """
    if not ffprobe_binary:
        return True

    args = [
        ffprobe_binary,
        "-v", "error",
        "-select_streams", "a",
        "-show_entries", "stream=index",
        "-of", "csv=p=0",
        str(source),
    ]

    try:
        result = run_subprocess_capture(args, timeout=PROBE_TIMEOUT_SEC)
    except (OSError, subprocess.SubprocessError) as e:
        logger.warning("ffprobe unavailable (%s) — mapping audio if present", e)
        return True

    if result.returncode != 0:
        logger.warning("ffprobe failed (rc=%s) — mapping audio if present", result.returncode)
        return True

    return bool(result.stdout.strip())


def build_filter_complex(renditions: list[Rendition] | tuple[Rendition, ...]) -> str:
    """
    [0:v]split=N[v0]..[vN-1];[vi]scale=-2:<height>:flags=lanczos,setsar=1[viout]
    Width is derived from the height and rounded to an even number.
    """
    if not renditions:
        raise ValueError("At least one rendition is required")

    branches = ''.join(f"[v{i}]" for i in range(len(renditions)))
    parts = [f"[0:v]split={len(renditions)}{branches}"]
    for i, rendition in enumerate(renditions):
        parts.append(
            f"[v{i}]scale=-2:{rendition.height}:flags={SCALE_FLAGS},setsar=1[v{i}out]"
        )
    return ';'.join(parts)


def build_var_stream_map(count: int, with_audio: bool) -> str:
    if with_audio:
        return ' '.join(f"v:{i},a:{i}" for i in range(count))
    return ' '.join(f"v:{i}" for i in range(count))


def build_ffmpeg_command(source: Path, output_dir: Path,
                         renditions: list[Rendition] | tuple[Rendition, ...],
                         hls_options: HlsOptions,
                         ffmpeg_binary: str = "ffmpeg",
                         with_audio: bool = True) -> list[str]:
    """Build the single ffmpeg invocation as an argument list."""
    cmd = [
        ffmpeg_binary,
        "-hide_banner",
        "-y",
        "-i", str(source),
        "-filter_complex", build_filter_complex(renditions),
    ]

    # One video branch per rendition, each paired with the optional audio
    for i in range(len(renditions)):
        cmd.extend(["-map", f"[v{i}out]"])
        if with_audio:
            cmd.extend(["-map", "0:a?"])

    # Shared codec profile
    cmd.extend(["-c:v", VIDEO_CODEC, "-preset", VIDEO_PRESET])
    if with_audio:
        cmd.extend([
            "-c:a", AUDIO_CODEC,
            "-b:a", AUDIO_BITRATE,
            "-ar", str(AUDIO_SAMPLE_RATE),
        ])

    # Per-branch rate control
    for i, rendition in enumerate(renditions):
        cmd.extend([
            f"-b:v:{i}", rendition.bitrate,
            f"-maxrate:v:{i}", rendition.maxrate,
            f"-bufsize:v:{i}", rendition.bufsize,
        ])

    cmd.extend([
        "-var_stream_map", build_var_stream_map(len(renditions), with_audio),
        "-master_pl_name", MASTER_PLAYLIST_NAME,
        "-f", "hls",
        "-hls_time", str(hls_options.segment_duration),
        "-hls_list_size", str(hls_options.list_size),
        "-hls_segment_filename", str(output_dir / SEGMENT_TEMPLATE),
        str(output_dir / VARIANT_PLAYLIST_TEMPLATE),
    ])
    return cmd


def convert_to_hls(source: Path, output_dir: Path,
                   renditions: list[Rendition] | tuple[Rendition, ...],
                   hls_options: HlsOptions,
                   ffmpeg_binary: str = "ffmpeg",
                   ffprobe_binary: str | None = None,
                   timeout: int = ENCODER_TIMEOUT_SEC) -> HlsPackage:
    """
    Transcode source into an HLS package under output_dir.

    Success requires exit status 0 AND a non-empty master playlist.
    Raises JobError(TRANSCODE_FAILED) carrying the encoder output otherwise.
    Partial output is left in place for the caller to handle.
    """
    try:
        output_dir.mkdir(parents=True, exist_ok=True)
    except OSError as e:
        raise JobError(ErrorCode.IO_FAILURE, f"Cannot create HLS directory {output_dir}: {e}")

    with_audio = has_audio_stream(source, ffprobe_binary)
    args = build_ffmpeg_command(source, output_dir, renditions, hls_options,
                                ffmpeg_binary, with_audio)

    logger.info("Executing FFmpeg command")
    logger.info("Command: %s", ' '.join(args))

    try:
        result = run_subprocess_combined(args, timeout=timeout)
    except subprocess.TimeoutExpired as e:
        output = e.output or ""
        if isinstance(output, bytes):
            output = output.decode('utf-8', errors='replace')
        raise JobError(ErrorCode.TRANSCODE_FAILED,
                       f"Failed to convert video to HLS: ffmpeg timed out after {timeout}s",
                       output=output)
    except OSError as e:
        raise JobError(ErrorCode.TRANSCODE_FAILED,
                       f"Failed to convert video to HLS: cannot run {ffmpeg_binary}: {e}")

    output = result.stdout or ""
    logger.info("FFmpeg output:\n%s", output)

    if result.returncode != 0:
        logger.error("FFmpeg failed with return code: %s", result.returncode)
        raise JobError(ErrorCode.TRANSCODE_FAILED,
                       f"Failed to convert video to HLS (rc={result.returncode}): "
                       f"{output[-_OUTPUT_TAIL:].strip()}",
                       output=output)

    package = HlsPackage(video_id=output_dir.name, output_dir=output_dir,
                         encoder_output=output)
    master = package.master_playlist
    if not master.is_file() or master.stat().st_size == 0:
        logger.error("Master playlist not found: %s", master)
        raise JobError(ErrorCode.TRANSCODE_FAILED,
                       "Failed to convert video to HLS: master playlist missing",
                       output=output)

    package.variant_playlists = [output_dir / uri for uri in read_master_variants(master)]
    if len(package.variant_playlists) != len(renditions):
        logger.warning("Master playlist lists %d variants, expected %d",
                       len(package.variant_playlists), len(renditions))

    logger.info("HLS package written: %s", master)
    return package

"""
Retention sweep: delete aged raw downloads and HLS packages.
"""

import shutil
import time
import logging
from pathlib import Path

from hlsrelay.core.constants import SECONDS_PER_DAY

logger = logging.getLogger(__name__)


def _is_expired(entry: Path, cutoff: float) -> bool:
    try:
        return entry.stat().st_mtime < cutoff
    except OSError as e:
        logger.warning("Cannot stat %s: %s", entry, e)
        return False


def _sweep_files(root: Path, cutoff: float) -> int:
    """Top-level regular files only."""
    deleted = 0
    for entry in root.iterdir():
        if entry.is_symlink() or not entry.is_file():
            continue
        if not _is_expired(entry, cutoff):
            continue
        try:
            entry.unlink()
            deleted += 1
            logger.debug("Deleted: %s", entry)
        except OSError as e:
            logger.warning("Failed to delete %s: %s", entry, e)
    return deleted


def _sweep_dirs(root: Path, cutoff: float) -> int:
    """Top-level directories only, removed recursively."""
    deleted = 0
    for entry in root.iterdir():
        if entry.is_symlink() or not entry.is_dir():
            continue
        if not _is_expired(entry, cutoff):
            continue
        try:
            shutil.rmtree(entry)
            deleted += 1
            logger.debug("Deleted: %s", entry)
        except OSError as e:
            logger.warning("Failed to delete %s: %s", entry, e)
    return deleted


def sweep(raw_dir: Path, hls_dir: Path, max_age_days: int,
          now: float | None = None) -> int:
    """
    Remove raw files and HLS directories last modified before
    now - max_age_days.  max_age_days <= 0 means retain forever.

    A failed deletion is logged and skipped; the return value counts
    successful deletions across both roots.
    """
    if max_age_days <= 0:
        return 0

    cutoff = (now if now is not None else time.time()) - max_age_days * SECONDS_PER_DAY
    deleted = 0

    for root, sweeper in ((raw_dir, _sweep_files), (hls_dir, _sweep_dirs)):
        if not root.is_dir():
            logger.debug("Skipping missing root: %s", root)
            continue
        try:
            deleted += sweeper(root, cutoff)
        except OSError as e:
            logger.warning("Failed to scan %s: %s", root, e)

    return deleted

"""
Security utilities for HLSRelay.
- Path containment checks for the managed directory roots
- Safe subprocess execution (argument arrays only)
"""

import subprocess
import pathlib
import logging

logger = logging.getLogger(__name__)


# ── Path safety ───────────────────────────────────────────────────────

def is_within_root(root: pathlib.Path, candidate: pathlib.Path) -> bool:
    """True if realpath(candidate) is root itself or lies beneath it."""
    try:
        real_root = root.resolve(strict=False)
        real_candidate = candidate.resolve(strict=False)
    except (OSError, RuntimeError):
        return False
    return real_candidate == real_root or real_root in real_candidate.parents


def contained_path(root: pathlib.Path, name: str) -> pathlib.Path:
    """
    Join a single path component onto root.  Raises ValueError if the result
    would land outside root (separators, '..', absolute names).
    """
    if not name or name in ('.', '..') or '/' in name or '\\' in name:
        raise ValueError(f"Unsafe path component: {name!r}")
    candidate = root / name
    if not is_within_root(root, candidate) or candidate.resolve() == root.resolve():
        raise ValueError(f"Path escapes {root}: {name!r}")
    return candidate


# ── Subprocess safety ─────────────────────────────────────────────────

def run_subprocess(args: list[str], **kwargs) -> subprocess.CompletedProcess:
    """
    Execute a subprocess using argument arrays only.
    shell=True is explicitly forbidden.
    """
    if not isinstance(args, (list, tuple)):
        raise TypeError("Subprocess args must be a list/tuple, not a string")

    kwargs.pop('shell', None)

    logger.debug("Running subprocess: %s", ' '.join(str(a) for a in args))
    return subprocess.run(args, shell=False, **kwargs)


def run_subprocess_capture(args: list[str], timeout: int = 300, **kwargs) -> subprocess.CompletedProcess:
    """Run subprocess and capture stdout/stderr separately."""
    return run_subprocess(
        args,
        capture_output=True,
        text=True,
        timeout=timeout,
        **kwargs,
    )


def run_subprocess_combined(args: list[str], timeout: int = 300, **kwargs) -> subprocess.CompletedProcess:
    """Run subprocess with stderr folded into stdout (encoder diagnostics)."""
    return run_subprocess(
        args,
        stdin=subprocess.DEVNULL,
        stdout=subprocess.PIPE,
        stderr=subprocess.STDOUT,
        text=True,
        errors='replace',
        timeout=timeout,
        **kwargs,
    )

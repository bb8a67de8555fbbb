#!/usr/bin/env python3
"""
HLSRelay v1.0.0 — command-line entry point.

    hlsrelay process <url> [--post-id N]   download + HLS transcode, prints JSON
    hlsrelay cleanup                       retention sweep (cron target)
    hlsrelay diagnose                      encoder and directory checks
"""

import sys
import json
import logging
import argparse
import traceback
from pathlib import Path
from datetime import datetime

# ── Determine project root ────────────────────────────────────────────
PROJECT_ROOT = Path(__file__).resolve().parent
if str(PROJECT_ROOT) not in sys.path:
    sys.path.insert(0, str(PROJECT_ROOT))

from hlsrelay.core.constants import APP_NAME, APP_VERSION, DEFAULT_CONFIG_PATH
from hlsrelay.core.config import load_config
from hlsrelay.core.log_setup import configure_logging

logger = logging.getLogger("hlsrelay.main")


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="hlsrelay",
                                     description="Download videos and publish them as HLS.")
    parser.add_argument("--config", type=Path, default=DEFAULT_CONFIG_PATH,
                        help="path to the JSON config file (default: %(default)s)")
    parser.add_argument("--version", action="version", version=f"{APP_NAME} {APP_VERSION}")

    sub = parser.add_subparsers(dest="command", required=True)

    process = sub.add_parser("process", help="download a video and convert it to HLS")
    process.add_argument("url")
    process.add_argument("--post-id", type=int, default=0)

    sub.add_parser("cleanup", help="delete artifacts older than the retention threshold")
    sub.add_parser("diagnose", help="check encoder binaries and directories")
    return parser


def cmd_process(config, args) -> int:
    from hlsrelay.core.processor import VideoProcessor

    result = VideoProcessor(config).process_video(args.url, args.post_id)
    print(json.dumps(result.as_dict(), indent=2))
    return 0 if result.ok else 1


def cmd_cleanup(config, args) -> int:
    from hlsrelay.core.processor import VideoProcessor

    print("Starting cleanup process...")
    deleted = VideoProcessor(config).cleanup_old_videos()
    print(f"Cleanup completed: {deleted} items deleted.")
    return 0


def cmd_diagnose(config, args) -> int:
    from hlsrelay.core.diagnostics import get_diagnostics

    print(json.dumps(get_diagnostics(config), indent=2))
    return 0


COMMANDS = {
    "process": cmd_process,
    "cleanup": cmd_cleanup,
    "diagnose": cmd_diagnose,
}


def main(argv: list[str] | None = None) -> int:
    args = build_parser().parse_args(argv)
    config = load_config(args.config)
    configure_logging(config.log_path, config.verbose_logging)

    logger.info("%s v%s %s at %s", APP_NAME, APP_VERSION, args.command,
                datetime.now().isoformat())

    try:
        return COMMANDS[args.command](config, args)
    except Exception as e:
        error_msg = f"{type(e).__name__}: {e}"
        logger.critical("Fatal error: %s\n%s", error_msg, traceback.format_exc())
        print(error_msg, file=sys.stderr)
        return 1


if __name__ == "__main__":
    sys.exit(main())

"""
HLS master playlist reader.
"""

from pathlib import Path


def parse_master_variants(text: str) -> list[str]:
    """
    Return the variant URIs of a master playlist, in playlist order.
    Each URI is the first non-comment line after an #EXT-X-STREAM-INF tag.
    """
    variants = []
    expecting_uri = False
    for raw in text.splitlines():
        line = raw.strip()
        if not line:
            continue
        if line.startswith('#EXT-X-STREAM-INF'):
            expecting_uri = True
            continue
        if line.startswith('#'):
            continue
        if expecting_uri:
            variants.append(line)
            expecting_uri = False
    return variants


def read_master_variants(master_path: Path) -> list[str]:
    """Read a master playlist from disk and list its variant URIs."""
    return parse_master_variants(master_path.read_text(encoding='utf-8', errors='replace'))

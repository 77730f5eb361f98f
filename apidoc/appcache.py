"""Offline application-cache manifest for the generated site."""

from __future__ import annotations

from datetime import datetime
from pathlib import Path
from typing import List

from .generator import APPCACHE_MANIFEST
from .logging import get_logger

logger = get_logger("appcache")


def cached_files(output_dir: Path) -> List[str]:
    """Every file under `output_dir` except the manifest, as sorted POSIX paths."""
    output_dir = Path(output_dir)
    files = [
        path.relative_to(output_dir).as_posix()
        for path in output_dir.rglob("*")
        if path.is_file()
    ]
    return sorted(name for name in files if name != APPCACHE_MANIFEST)


def write_appcache_manifest(output_dir: Path, now: datetime | None = None) -> Path:
    output_dir = Path(output_dir)
    timestamp = now or datetime.now()
    lines = [
        "CACHE MANIFEST",
        "",
        f"# VERSION: {timestamp}",
        "",
        "NETWORK:",
        "*",
        "",
        "CACHE:",
    ]
    files = cached_files(output_dir)
    lines.extend(files)

    target = output_dir / APPCACHE_MANIFEST
    target.write_text("\n".join(lines) + "\n", encoding="utf-8")
    logger.debug("Wrote %s listing %d files", APPCACHE_MANIFEST, len(files))
    return target


__all__ = ["cached_files", "write_appcache_manifest"]

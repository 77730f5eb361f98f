"""Output directory housekeeping, client script and static asset copies."""

from __future__ import annotations

import shutil
import subprocess
from concurrent.futures import ThreadPoolExecutor
from pathlib import Path
from typing import Callable, List, Sequence

from .generator import client_script_name
from .logging import get_logger

PACKAGE_DIR = Path(__file__).parent
CLIENT_DIR = PACKAGE_DIR / "client"
STATIC_DIR = PACKAGE_DIR / "static"

logger = get_logger("assets")

Runner = Callable[..., object]


def clean_output_directory(path: Path) -> None:
    """Delete `path` recursively and recreate it empty."""
    path = Path(path)
    if path.exists():
        shutil.rmtree(path)
    # Another process may have recreated it in between.
    path.mkdir(parents=True, exist_ok=True)


def compile_client_script(
    mode: str,
    output_dir: Path,
    command: Sequence[str] | None = None,
    *,
    runner: Runner | None = None,
) -> Path:
    """Produce `client-<mode>.js` in `output_dir`.

    Without a command the bundled script is copied. A command is a list of
    arguments in which `{source}` and `{output}` are substituted; it must exit
    successfully or `subprocess.CalledProcessError` propagates.
    """
    name = f"{client_script_name(mode)}.js"
    source = CLIENT_DIR / name
    output = Path(output_dir) / name

    if not command:
        shutil.copyfile(source, output)
        logger.debug("Copied client script %s", name)
        return output

    args = [part.format(source=source, output=output) for part in command]
    logger.debug("Compiling client script: %s", " ".join(args))
    run = runner or subprocess.run
    run(args, check=True, capture_output=True, text=True)
    return output


def copy_static_files(source_dir: Path, output_dir: Path, *, max_workers: int = 4) -> List[Path]:
    """Copy the top-level, non-hidden files of `source_dir` concurrently."""
    source_dir = Path(source_dir)
    output_dir = Path(output_dir)
    sources = sorted(
        path for path in source_dir.iterdir() if path.is_file() and not path.name.startswith(".")
    )

    def _copy(path: Path) -> Path:
        target = output_dir / path.name
        shutil.copyfile(path, target)
        return target

    with ThreadPoolExecutor(max_workers=max_workers) as executor:
        copied = list(executor.map(_copy, sources))

    logger.debug("Copied %d static files from %s", len(copied), source_dir)
    return copied


__all__ = [
    "CLIENT_DIR",
    "STATIC_DIR",
    "clean_output_directory",
    "compile_client_script",
    "copy_static_files",
]

"""Pipeline orchestration for a documentation run."""

from __future__ import annotations

from datetime import datetime
from pathlib import Path
from typing import Callable

from .appcache import write_appcache_manifest
from .assets import STATIC_DIR, clean_output_directory, compile_client_script, copy_static_files
from .comments import CommentMap
from .config import ApidocConfig
from .generator import DocGenerator, GenerationStats
from .logging import get_logger
from .mirrors import load_snapshot
from .models import Program


class Orchestrator:
    """Runs a full documentation pass: clean, load, generate, then copy assets."""

    def __init__(
        self,
        *,
        clock: Callable[[], datetime] | None = None,
        static_dir: Path | None = None,
    ) -> None:
        self.logger = get_logger("orchestrator")
        self._clock = clock or datetime.now
        self._static_dir = static_dir or STATIC_DIR

    def run(self, snapshot: Path, config: ApidocConfig) -> GenerationStats:
        """Document the program stored in `snapshot` into `config.output_dir`."""
        program = load_snapshot(snapshot)
        return self.document(program, config)

    def document(self, program: Program, config: ApidocConfig) -> GenerationStats:
        output_dir = Path(config.output_dir)
        self.logger.debug("Cleaning %s", output_dir)
        clean_output_directory(output_dir)

        generator = DocGenerator(
            program,
            config,
            comments=CommentMap(config.root),
            clock=self._clock,
        )
        stats = generator.generate()

        compile_client_script(config.mode, output_dir, config.client.compiler or None)
        copy_static_files(self._static_dir, output_dir)

        if config.generate_app_cache:
            write_appcache_manifest(output_dir, self._clock())

        self.logger.info("%s", summary_line(stats))
        return stats


def summary_line(stats: GenerationStats) -> str:
    return (
        f"Documented {stats.libraries} libraries, {stats.types} types, "
        f"and {stats.members} members."
    )


__all__ = ["Orchestrator", "summary_line"]

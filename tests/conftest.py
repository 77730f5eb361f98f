from __future__ import annotations

import logging
from pathlib import Path
from typing import Iterator

import pytest

from apidoc.logging import get_logger
from tests._fixtures.snapshot_builder import SnapshotBuilder


@pytest.fixture
def snapshot_builder(tmp_path: Path) -> SnapshotBuilder:
    """Provide a reusable snapshot builder rooted at the pytest tmp_path."""
    return SnapshotBuilder(tmp_path)


@pytest.fixture
def apidoc_logger() -> Iterator[logging.Logger]:
    """Detach and close whatever handlers a test installs on the apidoc logger."""
    logger = get_logger()
    yield logger
    for handler in list(logger.handlers):
        logger.removeHandler(handler)
        handler.close()
    logger.setLevel(logging.NOTSET)
    logger.propagate = True

"""Per-page output buffers and relative link computation."""

from __future__ import annotations

import html
import re
from pathlib import Path
from typing import List, Optional

from .logging import get_logger

_ABSOLUTE_URL = re.compile(r"^\w+:")

logger = get_logger("pages")


def is_absolute(url: str) -> bool:
    """URLs that start with a scheme (`http:`, `mailto:`, ...) are absolute."""
    return bool(_ABSOLUTE_URL.match(url))


def relative_path(from_page: str, target: str) -> str:
    """Rewrite `target` (relative to the output root) to be relative to `from_page`."""
    if is_absolute(target):
        return target
    return "../" * from_page.count("/") + target


class OutputPage:
    """Append-only text buffer bound to one output-relative path."""

    def __init__(self, path: str) -> None:
        self.path = path
        self._parts: List[str] = []

    @property
    def depth(self) -> int:
        return self.path.count("/")

    def write(self, text: str) -> None:
        self._parts.append(text)

    def writeln(self, text: str = "") -> None:
        self._parts.append(text)
        self._parts.append("\n")

    def getvalue(self) -> str:
        return "".join(self._parts)

    def relative(self, href: str) -> str:
        return relative_path(self.path, href)

    def a(self, href: str, contents: str, css: Optional[str] = None) -> str:
        """Build a hyperlink from this page; external links are marked for styling."""
        rel = ' rel="external"' if is_absolute(href) else ""
        css_class = f' class="{css}"' if css else ""
        return f'<a href="{html.escape(self.relative(href))}"{css_class}{rel}>{contents}</a>'


class PageWriter:
    """Opens page buffers and flushes each to disk exactly once."""

    def __init__(self, output_dir: Path) -> None:
        self.output_dir = Path(output_dir)
        self.written: List[str] = []
        self._open: set[str] = set()

    def open(self, path: str) -> OutputPage:
        if path in self._open or path in self.written:
            raise RuntimeError(f"Page {path} was already opened")
        self._open.add(path)
        return OutputPage(path)

    def close(self, page: OutputPage, text: Optional[str] = None) -> Path:
        """Write `text` (the buffered content by default) to the page's file."""
        if page.path not in self._open:
            raise RuntimeError(f"Page {page.path} is not open")
        self._open.discard(page.path)
        target = self.output_dir / page.path
        target.parent.mkdir(parents=True, exist_ok=True)
        target.write_text(page.getvalue() if text is None else text, encoding="utf-8")
        self.written.append(page.path)
        logger.debug("Wrote %s", page.path)
        return target


__all__ = ["OutputPage", "PageWriter", "is_absolute", "relative_path"]

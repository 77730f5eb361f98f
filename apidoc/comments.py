"""Locate raw doc comments preceding declarations in source files."""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from pathlib import Path
from typing import Dict, List, Optional

from .models import Location

_BLOCK_DOC = re.compile(r"/\*\*(?!/)(.*?)\*/", re.DOTALL)
_LINE_DOC = re.compile(r"(?:[ \t]*///[^\n]*\n?)+")
_PLAIN_COMMENT = re.compile(r"//[^\n]*|/\*.*?\*/", re.DOTALL)
_LIBRARY_DIRECTIVE = re.compile(r"#?library\b")


@dataclass
class _SourceComments:
    by_offset: Dict[int, str] = field(default_factory=dict)
    library: Optional[str] = None


class CommentMap:
    """Maps declaration offsets to the doc comment written right before them.

    Each source file is parsed once. A comment belongs to the first token
    that follows it; ordinary (non-doc) comments in between are skipped.
    """

    def __init__(self, root: Path | None = None) -> None:
        self._root = root
        self._cache: Dict[str, _SourceComments] = {}

    def find(self, location: Optional[Location]) -> Optional[str]:
        """Return the doc comment preceding the declaration at `location`."""
        if location is None or not location.source:
            return None
        return self._parse(location.source).by_offset.get(location.offset)

    def find_library(self, source: Optional[str]) -> Optional[str]:
        """Return the doc comment attached to the library directive in `source`."""
        if not source:
            return None
        return self._parse(source).library

    def _parse(self, source: str) -> _SourceComments:
        cached = self._cache.get(source)
        if cached is not None:
            return cached

        comments = _SourceComments()
        path = Path(source)
        if self._root is not None and not path.is_absolute():
            path = self._root / path
        if path.is_file():
            text = path.read_text(encoding="utf-8")
            for body, end in _scan_doc_comments(text):
                target = _next_token_offset(text, end)
                if target is None:
                    continue
                comments.by_offset[target] = body
                if comments.library is None and _LIBRARY_DIRECTIVE.match(text, target):
                    comments.library = body

        self._cache[source] = comments
        return comments


def _scan_doc_comments(text: str) -> List[tuple[str, int]]:
    found: List[tuple[int, str, int]] = []
    for match in _BLOCK_DOC.finditer(text):
        found.append((match.start(), _clean_block(match.group(1)), match.end()))
    for match in _LINE_DOC.finditer(text):
        if _inside(found, match.start()):
            continue
        found.append((match.start(), _clean_lines(match.group(0)), match.end()))
    found.sort()
    return [(body, end) for _, body, end in found]


def _inside(spans: List[tuple[int, str, int]], offset: int) -> bool:
    return any(start <= offset < end for start, _, end in spans)


def _next_token_offset(text: str, position: int) -> Optional[int]:
    while position < len(text):
        if text[position].isspace():
            position += 1
            continue
        if text.startswith("/**", position) or text.startswith("///", position):
            # Another doc comment takes precedence.
            return None
        plain = _PLAIN_COMMENT.match(text, position)
        if plain:
            position = plain.end()
            continue
        return position
    return None


def _clean_block(body: str) -> str:
    lines = body.splitlines()
    cleaned: List[str] = []
    for line in lines:
        stripped = line.strip()
        if stripped.startswith("*"):
            stripped = stripped[1:]
            if stripped.startswith(" "):
                stripped = stripped[1:]
            cleaned.append(stripped.rstrip())
        else:
            cleaned.append(line.strip())
    return "\n".join(cleaned).strip("\n").strip()


def _clean_lines(block: str) -> str:
    cleaned: List[str] = []
    for line in block.splitlines():
        content = line.strip()[3:]
        if content.startswith(" "):
            content = content[1:]
        cleaned.append(content.rstrip())
    return "\n".join(cleaned).strip()


__all__ = ["CommentMap"]

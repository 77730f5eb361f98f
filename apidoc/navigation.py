"""Navigation index: baked sidebar HTML or the `nav.json` sidecar."""

from __future__ import annotations

import html
import json
from dataclasses import dataclass, field
from typing import Dict, List, Optional

from .models import Library, TypeDecl
from .pages import OutputPage
from .render.types import type_name
from .symbols import SymbolIndex, is_exception, visible_types

NAV_JSON = "nav.json"


def type_icon(decl: TypeDecl) -> str:
    if is_exception(decl):
        return "exception"
    if decl.is_class:
        return "class"
    return "interface"


@dataclass(frozen=True)
class TypeEntry:
    """One public type as listed in the navigation."""

    name: str
    kind: str
    icon: str
    url: str
    decl: TypeDecl = field(compare=False, repr=False)


@dataclass(frozen=True)
class LibraryEntry:
    """A documented library and its public types in name order."""

    name: str
    url: str
    types: tuple[TypeEntry, ...]
    library: Library = field(compare=False, repr=False)


class NavigationModel:
    """Read-only projection of the documented libraries and their types."""

    def __init__(self, libraries: List[LibraryEntry]) -> None:
        self.libraries = libraries

    @classmethod
    def build(cls, index: SymbolIndex) -> "NavigationModel":
        entries: List[LibraryEntry] = []
        for library in index.libraries:
            types = tuple(
                TypeEntry(
                    name=type_name(decl),
                    kind="class" if decl.is_class else "interface",
                    icon=type_icon(decl),
                    url=index.type_url(decl),
                    decl=decl,
                )
                for decl in visible_types(library)
            )
            entries.append(
                LibraryEntry(
                    name=library.name,
                    url=index.library_url(library),
                    types=types,
                    library=library,
                )
            )
        return cls(entries)

    def to_json(self) -> Dict[str, List[Dict[str, str]]]:
        return {
            entry.name: [{"name": item.name, "kind": item.kind, "url": item.url} for item in entry.types]
            for entry in self.libraries
        }

    def library_urls(self) -> Dict[str, str]:
        return {entry.name: entry.url for entry in self.libraries}

    def dumps(self) -> str:
        return json.dumps(self.to_json()) + "\n"

    def render_sidebar(
        self,
        page: OutputPage,
        current_library: Optional[Library] = None,
        current_type: Optional[TypeDecl] = None,
    ) -> str:
        """Sidebar for one page: only the current library is expanded."""
        lines: List[str] = []
        for entry in self.libraries:
            name = html.escape(entry.name)
            is_current = entry.library is current_library
            if is_current and current_type is None:
                heading = f"<strong>{name}</strong>"
            else:
                heading = page.a(entry.url, name)
            lines.append(f'<h2><div class="icon-library"></div>{heading}</h2>')
            if is_current:
                lines.extend(self._render_types(page, entry, current_type))
        return "\n".join(lines)

    @staticmethod
    def _render_types(
        page: OutputPage, entry: LibraryEntry, current_type: Optional[TypeDecl]
    ) -> List[str]:
        # Exceptions are listed after the other types.
        ordered = [item for item in entry.types if item.icon != "exception"]
        ordered += [item for item in entry.types if item.icon == "exception"]
        if not ordered:
            return []
        lines = ['<ul class="icon">']
        for item in ordered:
            label = f'<div class="icon-{item.icon}"></div>'
            if item.decl is current_type:
                lines.append(f"<li>{label}<strong>{item.name}</strong></li>")
            else:
                lines.append(f"<li>{page.a(item.url, label + item.name)}</li>")
        lines.append("</ul>")
        return lines


__all__ = ["LibraryEntry", "NAV_JSON", "NavigationModel", "TypeEntry", "type_icon"]

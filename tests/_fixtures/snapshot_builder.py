"""Helper utilities for constructing program snapshots in tests."""

from __future__ import annotations

import json
import textwrap
from pathlib import Path
from typing import Any, Dict, List, Mapping

from apidoc.config import MODE_LIVE_NAV, ApidocConfig
from apidoc.mirrors import load_program_data
from apidoc.models import Library, Program, TypeDecl


class SnapshotBuilder:
    """Collects library entries and source files for a throwaway project."""

    def __init__(self, tmp_path: Path) -> None:
        self.root = tmp_path / "project"
        self.root.mkdir()
        self.libraries: List[Dict[str, Any]] = []

    def write(self, relative: str, content: str) -> str:
        """Write a source file into the project and return its relative path."""
        path = self.root / relative
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(textwrap.dedent(content).lstrip("\n"), encoding="utf-8")
        return relative

    def locate(self, source: str, snippet: str) -> Dict[str, Any]:
        """Location mapping for the first occurrence of `snippet` in `source`."""
        text = (self.root / source).read_text(encoding="utf-8")
        offset = text.index(snippet)
        column = offset - (text.rfind("\n", 0, offset) + 1)
        return {"source": source, "offset": offset, "column": column, "text": snippet}

    def library(self, name: str, **entry: Any) -> Dict[str, Any]:
        library = {"name": name, "types": [], "members": [], **entry}
        self.libraries.append(library)
        return library

    def data(self) -> Dict[str, Any]:
        return {"libraries": self.libraries}

    def program(self) -> Program:
        return load_program_data(self.data())

    def write_snapshot(self, name: str = "snapshot.json") -> Path:
        path = self.root / name
        path.write_text(json.dumps(self.data(), indent=2), encoding="utf-8")
        return path

    def config(self, **overrides: Any) -> ApidocConfig:
        config = ApidocConfig(
            root=self.root,
            output_dir=self.root / "docs",
            mode=MODE_LIVE_NAV,
            omit_generation_time=True,
        )
        for key, value in overrides.items():
            setattr(config, key, value)
        return config


def klass(name: str, **entry: Any) -> Dict[str, Any]:
    return {"kind": "class", "name": name, **entry}


def interface(name: str, **entry: Any) -> Dict[str, Any]:
    return {"kind": "interface", "name": name, **entry}


def method(name: str, **entry: Any) -> Dict[str, Any]:
    return {"kind": "method", "name": name, **entry}


def field(name: str, **entry: Any) -> Dict[str, Any]:
    return {"kind": "field", "name": name, **entry}


def param(name: str, ref: Any = "dynamic", **entry: Any) -> Dict[str, Any]:
    return {"name": name, "type": ref, **entry}


def library_named(program: Program, name: str) -> Library:
    for library in program.libraries:
        if library.name == name:
            return library
    raise KeyError(name)


def type_named(program: Program, qualified: str) -> TypeDecl:
    library, _, name = qualified.rpartition(".")
    return library_named(program, library).types[name]


def read_pages(output_dir: Path) -> Mapping[str, str]:
    """Return every generated file keyed by its POSIX path relative to `output_dir`."""
    return {
        path.relative_to(output_dir).as_posix(): path.read_text(encoding="utf-8")
        for path in sorted(output_dir.rglob("*"))
        if path.is_file()
    }


__all__ = [
    "SnapshotBuilder",
    "field",
    "interface",
    "klass",
    "library_named",
    "method",
    "param",
    "read_pages",
    "type_named",
]

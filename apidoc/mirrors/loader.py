"""Load mirror snapshots (JSON or YAML) into the program model."""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any, Dict, List, Mapping, Optional, Sequence

import yaml

from ..logging import get_logger
from ..models import (
    ClassDecl,
    DynamicType,
    Field,
    FunctionType,
    InterfaceDecl,
    Library,
    Location,
    Member,
    Method,
    Parameter,
    Program,
    TypeDecl,
    TypedefDecl,
    TypeInstance,
    TypeRef,
    TypeVariable,
    VoidType,
)

_DEFAULT_OBJECT = "core.Object"
_KINDS = {"class": ClassDecl, "interface": InterfaceDecl, "typedef": TypedefDecl}

logger = get_logger("mirrors")


class SnapshotError(RuntimeError):
    """Raised when a mirror snapshot cannot be read or linked."""


def load_snapshot(path: Path) -> Program:
    """Read a snapshot file from disk and link it into a `Program`."""
    path = Path(path).expanduser()
    if not path.exists():
        raise SnapshotError(f"Snapshot not found: {path}")
    text = path.read_text(encoding="utf-8")
    suffix = path.suffix.lower()
    try:
        if suffix in {".yml", ".yaml"}:
            data = yaml.safe_load(text)
        else:
            data = json.loads(text)
    except (ValueError, yaml.YAMLError) as exc:
        raise SnapshotError(f"Failed to parse {path.name}: {exc}") from exc
    if not isinstance(data, dict):
        raise SnapshotError(f"{path.name} must contain a mapping at the root")
    program = load_program_data(data)
    logger.debug("Loaded %d libraries from %s", len(program.libraries), path)
    return program


def load_program_data(data: Mapping[str, Any]) -> Program:
    """Build a linked `Program` from an already-parsed snapshot mapping."""
    return _Linker(data).link()


class _Linker:
    """Two-pass builder: declare every type first, then resolve references."""

    def __init__(self, data: Mapping[str, Any]) -> None:
        self._data = data
        self._types: Dict[str, TypeDecl] = {}
        self._program = Program()

    def link(self) -> Program:
        raw_libraries = _as_list(self._data.get("libraries"), "libraries")
        pending: List[tuple[Library, Mapping[str, Any]]] = []
        for raw_library in raw_libraries:
            library = self._declare_library(_as_mapping(raw_library, "library"))
            self._program.libraries.append(library)
            pending.append((library, raw_library))

        self._program.object_type = self._resolve_object()

        for library, raw_library in pending:
            for raw_type in _as_list(raw_library.get("types"), f"{library.name}.types"):
                decl = library.types[_require_str(raw_type, "name")]
                self._link_type(decl, raw_type)
            for raw_member in _as_list(raw_library.get("members"), f"{library.name}.members"):
                member = self._parse_member(raw_member, library, [], static=True)
                _add_unique(library.members, member.key, member, library.name)
        return self._program

    def _declare_library(self, raw: Mapping[str, Any]) -> Library:
        name = _require_str(raw, "name")
        library = Library(name=name, location=_parse_location(raw.get("location")))
        for raw_type in _as_list(raw.get("types"), f"{name}.types"):
            raw_type = _as_mapping(raw_type, f"{name}.types")
            kind = str(raw_type.get("kind", "class"))
            factory = _KINDS.get(kind)
            if factory is None:
                raise SnapshotError(f"Unknown type kind '{kind}' in library {name}")
            decl = factory(
                name=_require_str(raw_type, "name"),
                library=library,
                location=_parse_location(raw_type.get("location")),
            )
            decl.type_variables = [
                TypeVariable(name=_require_str(raw_var, "name"), owner=decl)
                for raw_var in _as_list(raw_type.get("type_variables"), f"{decl.name}.type_variables")
            ]
            _add_unique(library.types, decl.name, decl, name)
            self._types[f"{name}.{decl.name}"] = decl
        return library

    def _resolve_object(self) -> ClassDecl:
        qualified = str(self._data.get("object") or _DEFAULT_OBJECT)
        decl = self._types.get(qualified)
        if isinstance(decl, ClassDecl):
            return decl
        if decl is not None:
            raise SnapshotError(f"Root type {qualified} must be a class")
        # The root lives in a library outside the documented set.
        library_name, _, type_name = qualified.rpartition(".")
        library = Library(name=library_name or "core")
        root = ClassDecl(name=type_name, library=library)
        library.types[root.name] = root
        self._types[qualified] = root
        return root

    def _link_type(self, decl: TypeDecl, raw: Mapping[str, Any]) -> None:
        scope = list(decl.type_variables)
        for variable, raw_var in zip(decl.type_variables, _as_list(raw.get("type_variables"), decl.name)):
            bound = raw_var.get("bound")
            variable.bound = self._parse_ref(bound, scope) if bound is not None else None

        interfaces = [self._parse_ref(item, scope) for item in _as_list(raw.get("interfaces"), decl.name)]

        if isinstance(decl, ClassDecl):
            decl.class_interfaces = interfaces
            if decl is self._program.object_type:
                decl.superclass = None
            elif "superclass" in raw and raw["superclass"] is not None:
                decl.superclass = self._parse_ref(raw["superclass"], scope)
            else:
                decl.superclass = self._program.object_type
            for raw_ctor in _as_list(raw.get("constructors"), f"{decl.name}.constructors"):
                ctor = self._parse_constructor(raw_ctor, decl, scope)
                _add_unique(decl.constructors, ctor.display_name, ctor, decl.name)
        elif isinstance(decl, InterfaceDecl):
            decl.super_interfaces = interfaces
            if raw.get("default_class") is not None:
                decl.default_class = self._parse_ref(raw["default_class"], scope)
        elif isinstance(decl, TypedefDecl):
            definition = raw.get("definition")
            if definition is not None:
                parsed = self._parse_ref(definition, scope)
                if not isinstance(parsed, FunctionType):
                    raise SnapshotError(f"Typedef {decl.name} must define a function type")
                decl.definition = parsed

        for raw_member in _as_list(raw.get("members"), f"{decl.name}.members"):
            member = self._parse_member(raw_member, decl, scope, static=None)
            _add_unique(decl.members, member.key, member, decl.name)

    def _parse_constructor(
        self, raw: Any, decl: ClassDecl, scope: Sequence[TypeVariable]
    ) -> Method:
        raw = _as_mapping(raw, f"{decl.name}.constructors")
        return Method(
            name=decl.name,
            constructor_name=str(raw.get("name") or ""),
            location=_parse_location(raw.get("location")),
            owner=decl,
            parameters=self._parse_parameters(raw.get("parameters"), scope),
            is_factory=bool(raw.get("factory", False)),
            is_const=bool(raw.get("const", False)),
        )

    def _parse_member(
        self,
        raw: Any,
        owner: Library | TypeDecl,
        scope: Sequence[TypeVariable],
        *,
        static: Optional[bool],
    ) -> Member:
        raw = _as_mapping(raw, f"{owner.name}.members")
        name = _require_str(raw, "name")
        is_static = static if static is not None else bool(raw.get("static", False))
        location = _parse_location(raw.get("location"))
        kind = str(raw.get("kind", "method"))
        if kind == "field":
            return Field(
                name=name,
                location=location,
                is_static=is_static,
                owner=owner,
                type=self._parse_ref(raw.get("type", "dynamic"), scope),
                is_final=bool(raw.get("final", False)),
            )
        if kind != "method":
            raise SnapshotError(f"Unknown member kind '{kind}' for {owner.name}.{name}")
        return Method(
            name=name,
            location=location,
            is_static=is_static,
            owner=owner,
            parameters=self._parse_parameters(raw.get("parameters"), scope),
            return_type=self._parse_ref(raw.get("return_type", "dynamic"), scope),
            is_getter=bool(raw.get("getter", False)),
            is_setter=bool(raw.get("setter", False)),
            is_operator=bool(raw.get("operator", False)),
        )

    def _parse_parameters(self, raw: Any, scope: Sequence[TypeVariable]) -> List[Parameter]:
        parameters: List[Parameter] = []
        for raw_param in _as_list(raw, "parameters"):
            raw_param = _as_mapping(raw_param, "parameter")
            default = raw_param.get("default")
            parameters.append(
                Parameter(
                    name=_require_str(raw_param, "name"),
                    type=self._parse_ref(raw_param.get("type", "dynamic"), scope),
                    optional=bool(raw_param.get("optional", False)),
                    has_default=default is not None,
                    default=str(default) if default is not None else None,
                )
            )
        return parameters

    def _parse_ref(self, raw: Any, scope: Sequence[TypeVariable]) -> TypeRef:
        if isinstance(raw, str):
            if raw == "void":
                return VoidType()
            if raw == "dynamic":
                return DynamicType()
            for variable in scope:
                if variable.name == raw:
                    return variable
            return self._lookup(raw)
        if isinstance(raw, dict):
            if "variable" in raw:
                name = str(raw["variable"])
                for variable in scope:
                    if variable.name == name:
                        return variable
                return TypeVariable(name=name)
            if "function" in raw:
                signature = _as_mapping(raw["function"], "function")
                return FunctionType(
                    return_type=self._parse_ref(signature.get("return_type", "dynamic"), scope),
                    parameters=self._parse_parameters(signature.get("parameters"), scope),
                )
            if "type" in raw:
                decl = self._lookup(str(raw["type"]))
                arguments = [self._parse_ref(arg, scope) for arg in _as_list(raw.get("arguments"), "arguments")]
                if not arguments:
                    return decl
                return TypeInstance(declaration=decl, arguments=arguments)
        raise SnapshotError(f"Unsupported type reference: {raw!r}")

    def _lookup(self, qualified: str) -> TypeDecl:
        decl = self._types.get(qualified)
        if decl is None:
            raise SnapshotError(f"Unknown type reference: {qualified}")
        return decl


def _parse_location(raw: Any) -> Optional[Location]:
    if raw is None:
        return None
    raw = _as_mapping(raw, "location")
    return Location(
        source=str(raw.get("source", "")),
        offset=int(raw.get("offset", 0)),
        column=int(raw.get("column", 0)),
        text=str(raw.get("text", "")),
    )


def _add_unique(target: Dict[str, Any], key: str, value: Any, scope: str) -> None:
    if key in target:
        raise SnapshotError(f"Duplicate declaration '{key}' in {scope}")
    target[key] = value


def _as_list(value: Any, context: str) -> List[Any]:
    if value is None:
        return []
    if not isinstance(value, list):
        raise SnapshotError(f"Expected a list for {context}")
    return value


def _as_mapping(value: Any, context: str) -> Mapping[str, Any]:
    if not isinstance(value, dict):
        raise SnapshotError(f"Expected a mapping for {context}")
    return value


def _require_str(raw: Mapping[str, Any], key: str) -> str:
    value = raw.get(key) if isinstance(raw, dict) else None
    if not isinstance(value, str) or not value:
        raise SnapshotError(f"Missing '{key}' in snapshot entry")
    return value


__all__ = ["SnapshotError", "load_program_data", "load_snapshot"]

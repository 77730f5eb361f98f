"""Deterministic, privacy-filtered views of a program and its page URLs."""

from __future__ import annotations

import re
from dataclasses import dataclass
from typing import Dict, Iterable, List, Optional, Sequence, Set, Tuple, TypeVar

from .models import (
    ClassDecl,
    Host,
    Library,
    Member,
    Method,
    Program,
    TypeDecl,
    declaration_of,
)

_UNSAFE_PATH_CHARS = re.compile(r"[^\w.-]")

# Page stems the generator writes at the top of the output directory.
RESERVED_STEMS = frozenset({"index"})

T = TypeVar("T")


def name_key(item: object) -> str:
    return getattr(item, "name").upper()


def order_by_name(items: Iterable[T]) -> List[T]:
    """Sort by case-insensitive simple name; ties keep their input order."""
    return sorted(items, key=name_key)


def sorted_libraries(program: Program, include: Optional[Sequence[str]] = None) -> List[Library]:
    """Return the libraries selected by `include` (all when `None`), sorted by name."""
    selected = [
        library
        for library in program.libraries
        if include is None or library.name in include
    ]
    return order_by_name(selected)


def visible_types(library: Library) -> List[TypeDecl]:
    return order_by_name(decl for decl in library.types.values() if not decl.is_private)


def visible_constructors(decl: TypeDecl) -> List[Method]:
    if not isinstance(decl, ClassDecl):
        return []
    constructors = [ctor for ctor in decl.constructors.values() if not ctor.is_private]
    return sorted(constructors, key=lambda ctor: ctor.display_name.upper())


def is_exception(decl: TypeDecl) -> bool:
    return decl.name.endswith("Exception")


@dataclass(frozen=True)
class MemberGroups:
    """Public members of a host partitioned for grouped rendering."""

    static_methods: Tuple[Member, ...] = ()
    static_fields: Tuple[Member, ...] = ()
    instance_methods: Tuple[Member, ...] = ()
    instance_fields: Tuple[Member, ...] = ()

    def __bool__(self) -> bool:
        return any(
            (self.static_methods, self.static_fields, self.instance_methods, self.instance_fields)
        )


def visible_members(host: Host) -> MemberGroups:
    """Partition public members of a library or type, each group sorted by name.

    Top-level library members are static: their methods are the library's
    functions and their fields its variables.
    """
    static_methods: List[Member] = []
    static_fields: List[Member] = []
    instance_methods: List[Member] = []
    instance_fields: List[Member] = []

    for member in order_by_name(host.members.values()):
        if member.is_private:
            continue
        is_static = member.is_static or isinstance(host, Library)
        if member.is_method:
            (static_methods if is_static else instance_methods).append(member)
        elif member.is_field:
            (static_fields if is_static else instance_fields).append(member)

    return MemberGroups(
        static_methods=tuple(static_methods),
        static_fields=tuple(static_fields),
        instance_methods=tuple(instance_methods),
        instance_fields=tuple(instance_fields),
    )


def sanitize(name: str) -> str:
    """Make a simple name safe to use as a file-system path segment."""
    return _UNSAFE_PATH_CHARS.sub("_", name) or "_"


def assign_slugs(items: Iterable[T], reserved: Iterable[str] = ()) -> Dict[T, str]:
    """Give each named item a path segment unique among `items`, ignoring case.

    Names that are already safe claim their own spelling first, so `Foo_`
    keeps `Foo_` and `Foo$` becomes `Foo_-2`. Later clashes get `-2`, `-3`
    and so on, as does any name matching one of the `reserved` stems.
    """
    taken: Set[str] = {stem.lower() for stem in reserved}
    slugs: Dict[T, str] = {}
    ordered = sorted(
        order_by_name(items),
        key=lambda item: sanitize(name_key(item)) != name_key(item),
    )
    for item in ordered:
        base = sanitize(getattr(item, "name"))
        slug = base
        suffix = 2
        while slug.lower() in taken:
            slug = f"{base}-{suffix}"
            suffix += 1
        taken.add(slug.lower())
        slugs[item] = slug
    return slugs


class SymbolIndex:
    """Immutable lookup tables built once per run.

    Holds the in-scope libraries in sorted order, the output URL of every
    library and type page, and the reverse inheritance edges of the whole
    program.
    """

    def __init__(self, program: Program, include: Optional[Sequence[str]] = None) -> None:
        self.program = program
        self.libraries: List[Library] = sorted_libraries(program, include)
        self._in_scope: Set[Library] = set(self.libraries)
        self._library_slugs = assign_slugs(program.libraries, reserved=RESERVED_STEMS)
        self._type_slugs = self._assign_type_slugs(program)
        self._subtypes = self._collect_subtypes(program)

    def includes(self, library: Optional[Library]) -> bool:
        return library is not None and library in self._in_scope

    def is_linkable(self, ref: object) -> bool:
        """True when `ref` names a public type whose library is documented."""
        decl = declaration_of(ref)
        if decl is None or decl.is_private:
            return False
        return self.includes(decl.library)

    def library_url(self, library: Library) -> str:
        return f"{self._slug(library)}.html"

    def type_url(self, ref: object) -> str:
        decl = declaration_of(ref)
        if decl is None:
            raise TypeError(f"{ref!r} has no page of its own")
        library = decl.library
        folder = self._slug(library) if library is not None else "_"
        slug = self._type_slugs.get(decl) or sanitize(decl.name)
        return f"{folder}/{slug}.html"

    def host_url(self, host: Host) -> str:
        if isinstance(host, Library):
            return self.library_url(host)
        return self.type_url(host)

    @staticmethod
    def member_anchor(member: Member) -> str:
        if isinstance(member, Method) and member.is_constructor:
            return f"new:{member.display_name}"
        return member.key

    def member_url(self, member: Member) -> str:
        if member.owner is None:
            raise ValueError(f"Member {member.name} has no owner")
        return f"{self.host_url(member.owner)}#{self.member_anchor(member)}"

    def subtypes(self, decl: TypeDecl) -> List[TypeDecl]:
        """Public types anywhere in the program that extend or implement `decl`."""
        return list(self._subtypes.get(decl, ()))

    def _slug(self, library: Library) -> str:
        return self._library_slugs.get(library) or sanitize(library.name)

    @staticmethod
    def _assign_type_slugs(program: Program) -> Dict[TypeDecl, str]:
        slugs: Dict[TypeDecl, str] = {}
        for library in program.libraries:
            slugs.update(assign_slugs(library.types.values()))
        return slugs

    @staticmethod
    def _collect_subtypes(program: Program) -> Dict[TypeDecl, Tuple[TypeDecl, ...]]:
        edges: Dict[TypeDecl, List[TypeDecl]] = {}
        for decl in program.all_types():
            if decl.is_private:
                continue
            supers = list(decl.interfaces)
            if isinstance(decl, ClassDecl) and decl.superclass is not None:
                supers.insert(0, decl.superclass)
            seen: Set[TypeDecl] = set()
            for ref in supers:
                parent = declaration_of(ref)
                if parent is None or parent in seen:
                    continue
                seen.add(parent)
                edges.setdefault(parent, []).append(decl)
        return {key: tuple(order_by_name(children)) for key, children in edges.items()}


__all__ = [
    "MemberGroups",
    "RESERVED_STEMS",
    "SymbolIndex",
    "assign_slugs",
    "is_exception",
    "name_key",
    "order_by_name",
    "sanitize",
    "sorted_libraries",
    "visible_constructors",
    "visible_members",
    "visible_types",
]

"""Resolve `[name]` references inside doc comments to declarations."""

from __future__ import annotations

import re
import xml.etree.ElementTree as etree
from dataclasses import dataclass
from typing import Mapping, Optional

from markdown.util import AtomicString

from ..models import ClassDecl, Library, Member, Method, TypeDecl
from ..pages import OutputPage
from ..symbols import SymbolIndex

_CONSTRUCTOR_REF = re.compile(r"new ([\w$]+)(?:\.([\w$]+))?")
_FOREIGN_MEMBER_REF = re.compile(r"([\w$]+)\.([\w$]+)")


@dataclass(frozen=True)
class ResolutionContext:
    """Lexical position of the comment being rendered."""

    library: Optional[Library] = None
    type: Optional[TypeDecl] = None
    member: Optional[Member] = None


class CrossReferenceResolver:
    """Turns a bracketed name into a link, a parameter span or a code span.

    Lookups go from the innermost scope outwards: parameters of the current
    member, members of the current type, then constructors, members of other
    types, types and top-level members of the current library. Imported
    libraries and the type parameters of the enclosing type are not searched.
    """

    def __init__(self, index: SymbolIndex) -> None:
        self.index = index

    def resolve(self, name: str, context: ResolutionContext, page: OutputPage) -> etree.Element:
        member = context.member
        if isinstance(member, Method):
            for parameter in member.parameters:
                if parameter.name == name:
                    return _element("span", name, css="param")

        if context.type is not None:
            target = self._find_in_type(context.type, name)
            if target is not None:
                return self._link(page, self.index.member_url(target), name)

        library = context.library
        if library is not None:
            link = self._resolve_in_library(library, name, page)
            if link is not None:
                return link

        return _element("code", name)

    def _resolve_in_library(
        self, library: Library, name: str, page: OutputPage
    ) -> Optional[etree.Element]:
        match = _CONSTRUCTOR_REF.fullmatch(name)
        if match:
            decl = _public(library.types, match.group(1))
            if isinstance(decl, ClassDecl):
                constructor_key = decl.name if match.group(2) is None else f"{decl.name}.{match.group(2)}"
                constructor = _public(decl.constructors, constructor_key)
                if constructor is not None:
                    return self._link(page, self.index.member_url(constructor), name)

        match = _FOREIGN_MEMBER_REF.fullmatch(name)
        if match:
            decl = _public(library.types, match.group(1))
            if decl is not None:
                member = _public(decl.members, match.group(2))
                if member is not None:
                    return self._link(page, self.index.member_url(member), name)

        decl = _public(library.types, name)
        if decl is not None:
            return self._link(page, self.index.type_url(decl), name)

        member = _public(library.members, name)
        if member is not None:
            return self._link(page, self.index.member_url(member), name)
        return None

    @staticmethod
    def _find_in_type(decl: TypeDecl, name: str) -> Optional[Member]:
        member = _public(decl.members, name)
        if member is not None:
            return member
        if isinstance(decl, ClassDecl):
            return _public(decl.constructors, name)
        return None

    @staticmethod
    def _link(page: OutputPage, href: str, name: str) -> etree.Element:
        element = _element("a", name, css="crossref")
        element.set("href", page.relative(href))
        return element


def _public(table: Mapping[str, object], key: str):
    candidate = table.get(key)
    if candidate is None or getattr(candidate, "is_private", False):
        return None
    return candidate


def _element(tag: str, text: str, *, css: Optional[str] = None) -> etree.Element:
    element = etree.Element(tag)
    element.text = AtomicString(text)
    if css:
        element.set("class", css)
    return element


__all__ = ["CrossReferenceResolver", "ResolutionContext"]

"""Inheritance relationships of a type: supertypes, subtypes and implementors."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import List, Optional

from .models import ClassDecl, InterfaceDecl, TypeDecl, TypeRef, declaration_of
from .symbols import SymbolIndex

# Upper bound on superclass chain length; cyclic snapshots stop here.
_MAX_CHAIN = 256


@dataclass
class Inheritance:
    """Types that touch a declaration in the hierarchy."""

    superclasses: List[TypeRef] = field(default_factory=list)
    subclasses: List[TypeDecl] = field(default_factory=list)
    implements: List[TypeRef] = field(default_factory=list)
    extends: List[TypeRef] = field(default_factory=list)
    subinterfaces: List[TypeDecl] = field(default_factory=list)
    implementors: List[TypeDecl] = field(default_factory=list)
    default_class: Optional[TypeRef] = None


class InheritanceAnalyzer:
    """Computes the hierarchy sections shown on a type's page."""

    def __init__(self, index: SymbolIndex) -> None:
        self.index = index

    def analyze(self, decl: TypeDecl) -> Optional[Inheritance]:
        # The root type has no superclass and far too many subclasses to list.
        if decl.is_object:
            return None

        result = Inheritance()
        subtypes = self.index.subtypes(decl)

        if isinstance(decl, ClassDecl):
            result.superclasses = self.superclass_chain(decl)
            result.subclasses = subtypes
            result.implements = _public(decl.interfaces)
            return result

        if isinstance(decl, InterfaceDecl):
            if decl.default_class is not None and not _is_private(decl.default_class):
                result.default_class = decl.default_class
        result.extends = _public(decl.interfaces)
        for subtype in subtypes:
            if subtype.is_class:
                result.implementors.append(subtype)
            else:
                result.subinterfaces.append(subtype)
        return result

    @staticmethod
    def superclass_chain(decl: ClassDecl) -> List[TypeRef]:
        """Superclasses from the most distant ancestor down to the direct parent.

        The root type itself is never part of the chain.
        """
        chain: List[TypeRef] = []
        current = decl.superclass
        while current is not None and len(chain) < _MAX_CHAIN:
            parent = declaration_of(current)
            if not isinstance(parent, ClassDecl) or parent.is_object:
                break
            chain.append(current)
            current = parent.superclass
        chain.reverse()
        return chain


def _is_private(ref: TypeRef) -> bool:
    decl = declaration_of(ref)
    return decl is not None and decl.is_private


def _public(refs: List[TypeRef]) -> List[TypeRef]:
    return [ref for ref in refs if not _is_private(ref)]


__all__ = ["Inheritance", "InheritanceAnalyzer"]

"""Core data models describing a reflected program."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Dict, List, Optional, Union


@dataclass(frozen=True)
class Location:
    """Source position of a declaration."""

    source: str
    offset: int = 0
    column: int = 0
    text: str = ""


@dataclass(eq=False)
class VoidType:
    """The `void` return type."""

    name: str = "void"


@dataclass(eq=False)
class DynamicType:
    """An untyped (inferred) reference."""

    name: str = "dynamic"


@dataclass(eq=False)
class TypeVariable:
    """A type parameter of a generic declaration."""

    name: str
    bound: Optional["TypeRef"] = None
    owner: Optional[object] = None


@dataclass(eq=False)
class FunctionType:
    """An unnamed function type, e.g. the type of a callback parameter."""

    return_type: "TypeRef"
    parameters: List["Parameter"] = field(default_factory=list)

    @property
    def name(self) -> str:
        return "Function"


@dataclass(eq=False)
class Parameter:
    """A formal parameter of a method or function type."""

    name: str
    type: "TypeRef"
    optional: bool = False
    has_default: bool = False
    default: Optional[str] = None


@dataclass(eq=False)
class Member:
    """Common view of library- and type-level members."""

    name: str
    location: Optional[Location] = None
    is_static: bool = False
    owner: Optional[Union["Library", "TypeDecl"]] = None

    @property
    def key(self) -> str:
        return self.name

    @property
    def is_private(self) -> bool:
        return self.name.startswith("_")

    @property
    def is_method(self) -> bool:
        return False

    @property
    def is_field(self) -> bool:
        return False


@dataclass(eq=False)
class Method(Member):
    """A function, method, accessor, operator or constructor."""

    parameters: List[Parameter] = field(default_factory=list)
    return_type: Optional["TypeRef"] = None
    is_getter: bool = False
    is_setter: bool = False
    is_operator: bool = False
    is_factory: bool = False
    is_const: bool = False
    constructor_name: Optional[str] = None

    @property
    def key(self) -> str:
        # Getters and setters share a name; keep both addressable.
        return f"{self.name}=" if self.is_setter else self.name

    @property
    def is_constructor(self) -> bool:
        return self.constructor_name is not None

    @property
    def is_private(self) -> bool:
        if self.constructor_name:
            return self.constructor_name.startswith("_")
        return self.name.startswith("_")

    @property
    def is_method(self) -> bool:
        return True

    @property
    def display_name(self) -> str:
        """`Type` or `Type.named` for constructors, the plain name otherwise."""
        if self.constructor_name:
            return f"{self.name}.{self.constructor_name}"
        return self.name


@dataclass(eq=False)
class Field(Member):
    """A variable declared at library or type level."""

    type: "TypeRef" = field(default_factory=DynamicType)
    is_final: bool = False

    @property
    def is_field(self) -> bool:
        return True


@dataclass(eq=False)
class TypeDecl:
    """Shared, kind-independent view of a type declaration.

    A declaration is the generic template: it exposes `type_variables`,
    never type arguments. Applications of it to arguments are modelled by
    `TypeInstance`.
    """

    name: str
    library: Optional["Library"] = None
    location: Optional[Location] = None
    type_variables: List[TypeVariable] = field(default_factory=list)
    members: Dict[str, Member] = field(default_factory=dict)

    kind = "Interface"

    @property
    def declaration(self) -> "TypeDecl":
        return self

    @property
    def is_private(self) -> bool:
        return self.name.startswith("_")

    @property
    def is_class(self) -> bool:
        return False

    @property
    def is_object(self) -> bool:
        return False

    @property
    def interfaces(self) -> List["TypeRef"]:
        return []


@dataclass(eq=False)
class ClassDecl(TypeDecl):
    """A class; the class without a superclass is the universal root type."""

    superclass: Optional["TypeRef"] = None
    class_interfaces: List["TypeRef"] = field(default_factory=list)
    constructors: Dict[str, Method] = field(default_factory=dict)

    kind = "Class"

    @property
    def is_class(self) -> bool:
        return True

    @property
    def is_object(self) -> bool:
        return self.superclass is None

    @property
    def interfaces(self) -> List["TypeRef"]:
        return self.class_interfaces


@dataclass(eq=False)
class InterfaceDecl(TypeDecl):
    """An interface, optionally naming the class its constructors create."""

    super_interfaces: List["TypeRef"] = field(default_factory=list)
    default_class: Optional["TypeRef"] = None

    kind = "Interface"

    @property
    def interfaces(self) -> List["TypeRef"]:
        return self.super_interfaces


@dataclass(eq=False)
class TypedefDecl(TypeDecl):
    """A named function type."""

    definition: Optional[FunctionType] = None

    kind = "Typedef"


@dataclass(eq=False)
class TypeInstance:
    """A generic declaration applied to type arguments."""

    declaration: TypeDecl
    arguments: List["TypeRef"] = field(default_factory=list)

    @property
    def name(self) -> str:
        return self.declaration.name

    @property
    def library(self) -> Optional["Library"]:
        return self.declaration.library

    @property
    def is_private(self) -> bool:
        return self.declaration.is_private

    @property
    def is_class(self) -> bool:
        return self.declaration.is_class

    @property
    def is_object(self) -> bool:
        return self.declaration.is_object


TypeRef = Union[VoidType, DynamicType, TypeVariable, FunctionType, TypeDecl, TypeInstance]


@dataclass(eq=False)
class Library:
    """A library: named collection of types and top-level members."""

    name: str
    location: Optional[Location] = None
    types: Dict[str, TypeDecl] = field(default_factory=dict)
    members: Dict[str, Member] = field(default_factory=dict)

    @property
    def is_private(self) -> bool:
        return False


@dataclass(eq=False)
class Program:
    """Root of a reflected program; read-only once loaded."""

    libraries: List[Library] = field(default_factory=list)
    object_type: Optional[ClassDecl] = None

    def all_types(self) -> List[TypeDecl]:
        return [decl for library in self.libraries for decl in library.types.values()]


Host = Union[Library, TypeDecl]


def declaration_of(ref: object) -> Optional[TypeDecl]:
    """Return the generic declaration behind a type reference, if any."""
    if isinstance(ref, TypeInstance):
        return ref.declaration
    if isinstance(ref, TypeDecl):
        return ref
    return None


__all__ = [
    "ClassDecl",
    "DynamicType",
    "Field",
    "FunctionType",
    "InterfaceDecl",
    "Library",
    "Location",
    "Member",
    "Method",
    "Parameter",
    "Program",
    "TypeDecl",
    "TypeInstance",
    "TypeRef",
    "TypeVariable",
    "TypedefDecl",
    "VoidType",
    "declaration_of",
    "Host",
]

"""Render type references as linked HTML fragments."""

from __future__ import annotations

import html
from typing import Iterable, List, Optional

from ..models import (
    DynamicType,
    FunctionType,
    Host,
    Parameter,
    TypeDecl,
    TypeInstance,
    TypeVariable,
    VoidType,
)
from ..pages import OutputPage
from ..symbols import SymbolIndex


class TypeRenderer:
    """Formats type expressions for one output page.

    Links are computed relative to `page`; only public types from documented
    libraries are linked, everything else degrades to plain text.
    """

    def __init__(self, index: SymbolIndex, page: OutputPage) -> None:
        self.index = index
        self.page = page

    def render(self, enclosing: Host, type_ref: object, param_name: Optional[str] = None) -> str:
        """Annotate a declaration with its type, optionally followed by a parameter name."""
        if isinstance(type_ref, DynamicType):
            # Untyped declarations show no annotation at all.
            return html.escape(param_name) if param_name is not None else ""

        if param_name is not None and isinstance(type_ref, FunctionType):
            return (
                self.render(enclosing, type_ref.return_type)
                + html.escape(param_name)
                + self.parameters(enclosing, type_ref.parameters)
            )

        annotated = self.link(enclosing, type_ref) + " "
        if param_name is not None:
            annotated += html.escape(param_name)
        return annotated

    def link(self, enclosing: Host, type_ref: object) -> str:
        """Render a type reference, hyperlinking the parts that have pages."""
        if isinstance(type_ref, VoidType):
            return "void"
        if isinstance(type_ref, DynamicType):
            return "dynamic"
        if isinstance(type_ref, TypeVariable):
            # Type variables have no page; point back at the generic declaration.
            return self.page.a(self.index.host_url(enclosing), html.escape(type_ref.name))
        if isinstance(type_ref, FunctionType):
            return (
                self.render(enclosing, type_ref.return_type)
                + "Function"
                + self.parameters(enclosing, type_ref.parameters)
            )
        if not isinstance(type_ref, (TypeDecl, TypeInstance)):
            raise TypeError(f"Unsupported type reference: {type_ref!r}")

        base = html.escape(type_ref.name)
        if self.index.is_linkable(type_ref):
            rendered = self.page.a(self.index.type_url(type_ref), base)
        else:
            rendered = base

        if isinstance(type_ref, TypeDecl):
            # A declaration exposes type variables, never type arguments.
            return rendered

        if type_ref.arguments:
            arguments = ", ".join(self.link(enclosing, arg) for arg in type_ref.arguments)
            rendered += f"&lt;{arguments}&gt;"
        return rendered

    def parameters(self, enclosing: Host, parameters: Iterable[Parameter]) -> str:
        """Format a parameter list, bracketing the optional tail."""
        parts: List[str] = []
        in_optionals = False
        for parameter in parameters:
            prefix = ""
            if parameter.optional and not in_optionals:
                prefix = "["
                in_optionals = True
            text = prefix + self.render(enclosing, parameter.type, parameter.name)
            if parameter.optional and parameter.has_default:
                text += f" = {html.escape(parameter.default or '')}"
            parts.append(text)
        closing = "]" if in_optionals else ""
        return f"({', '.join(parts)}{closing})"


def type_name(type_ref: object, show_bounds: bool = False) -> str:
    """Human-friendly, HTML-escaped name of a type.

    Declarations list their type variables (with non-trivial bounds when
    `show_bounds` is set); instantiations list their arguments.
    """
    if isinstance(type_ref, (VoidType, DynamicType)):
        return type_ref.name
    if isinstance(type_ref, TypeVariable):
        return html.escape(type_ref.name)
    if isinstance(type_ref, FunctionType):
        return "Function"

    if isinstance(type_ref, TypeDecl):
        variables: List[str] = []
        for variable in type_ref.type_variables:
            bound = variable.bound
            if show_bounds and bound is not None and not _is_root(bound):
                variables.append(
                    f"{html.escape(variable.name)} extends {type_name(bound, show_bounds=True)}"
                )
            else:
                variables.append(html.escape(variable.name))
        if not variables:
            return html.escape(type_ref.name)
        return f"{html.escape(type_ref.name)}&lt;{', '.join(variables)}&gt;"

    if isinstance(type_ref, TypeInstance):
        if not type_ref.arguments:
            return html.escape(type_ref.name)
        arguments = ", ".join(type_name(arg) for arg in type_ref.arguments)
        return f"{html.escape(type_ref.name)}&lt;{arguments}&gt;"

    raise TypeError(f"Unsupported type reference: {type_ref!r}")


def _is_root(type_ref: object) -> bool:
    return bool(getattr(type_ref, "is_object", False))


__all__ = ["TypeRenderer", "type_name"]

"""Type, cross-reference and comment rendering."""

from .markup import CommentRenderer, CrossReferenceExtension
from .resolver import CrossReferenceResolver, ResolutionContext
from .types import TypeRenderer, type_name

__all__ = [
    "CommentRenderer",
    "CrossReferenceExtension",
    "CrossReferenceResolver",
    "ResolutionContext",
    "TypeRenderer",
    "type_name",
]

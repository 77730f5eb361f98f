"""Walks the symbol model and writes one HTML page per library and type."""

from __future__ import annotations

import html
import json
from dataclasses import dataclass, field, replace
from datetime import datetime
from pathlib import Path
from typing import Callable, List, Optional, Sequence

from jinja2 import Environment, FileSystemLoader

from .comments import CommentMap
from .config import MODE_LIVE_NAV, MODE_STATIC, ApidocConfig
from .inheritance import InheritanceAnalyzer
from .logging import get_logger
from .models import (
    DynamicType,
    Field,
    Host,
    Library,
    Location,
    Method,
    Program,
    TypeDecl,
    TypedefDecl,
    TypeRef,
    declaration_of,
)
from .navigation import NAV_JSON, NavigationModel, type_icon
from .pages import OutputPage, PageWriter
from .render.markup import CommentRenderer
from .render.resolver import CrossReferenceResolver, ResolutionContext
from .render.types import TypeRenderer, type_name
from .symbols import (
    SymbolIndex,
    is_exception,
    visible_constructors,
    visible_members,
    visible_types,
)

INDEX_PAGE = "index.html"
APPCACHE_MANIFEST = "appcache.manifest"
_LAYOUT_TEMPLATE = "page.html.j2"


@dataclass
class GenerationStats:
    """Totals reported at the end of a run."""

    libraries: int = 0
    types: int = 0
    members: int = 0
    pages: List[str] = field(default_factory=list)


def client_script_name(mode: str) -> str:
    if mode == MODE_STATIC:
        return "client-static"
    if mode == MODE_LIVE_NAV:
        return "client-live-nav"
    raise ValueError(f"Unknown mode {mode}")


class DocGenerator:
    """Generates the documentation pages for one program, once.

    Pages are produced strictly in order: `nav.json` (live navigation only),
    the index, then each library page followed by the pages of its public
    types. Every page is buffered and flushed before the next one starts.
    """

    def __init__(
        self,
        program: Program,
        config: ApidocConfig,
        *,
        comments: CommentMap | None = None,
        comment_renderer: CommentRenderer | None = None,
        clock: Callable[[], datetime] | None = None,
    ) -> None:
        self.config = config
        self.index = SymbolIndex(program, config.libraries)
        self.navigation = NavigationModel.build(self.index)
        self.inheritance = InheritanceAnalyzer(self.index)
        self.resolver = CrossReferenceResolver(self.index)
        self.comments = comments or CommentMap(config.root)
        self.comment_renderer = comment_renderer or CommentRenderer()
        self.writer = PageWriter(config.output_dir)
        self.stats = GenerationStats()
        self.logger = get_logger("generator")
        self._clock = clock or datetime.now
        self._env = self._create_env(config.site.templates_dir)

    def generate(self) -> GenerationStats:
        if self.config.mode == MODE_LIVE_NAV:
            self.doc_navigation_json()

        self.doc_index()
        for library in self.index.libraries:
            self.doc_library(library)

        self.stats.pages = list(self.writer.written)
        return self.stats

    # Pages

    def doc_navigation_json(self) -> None:
        page = self.writer.open(NAV_JSON)
        page.write(self.navigation.dumps())
        self.writer.close(page)

    def doc_index(self) -> None:
        page = self.writer.open(INDEX_PAGE)
        title = html.escape(self.config.site.title)
        page.writeln(f"<h2>{title}</h2>")
        page.writeln("<h3>Libraries</h3>")
        for library in self.index.libraries:
            link = page.a(self.index.library_url(library), html.escape(library.name))
            page.writeln(f"<h4>{link}</h4>")
        self._finish(page, title, [])

    def doc_library(self, library: Library) -> None:
        self.logger.debug("Library '%s':", library.name)
        self.stats.libraries += 1
        context = ResolutionContext(library=library)
        url = self.index.library_url(library)
        name = html.escape(library.name)

        page = self.writer.open(url)
        page.writeln(f"<h2><strong>{name}</strong> library</h2>")

        source = library.location.source if library.location else None
        comment = self.comments.find_library(source)
        if comment is not None:
            page.writeln(f'<div class="doc">{self._render_comment(page, comment, context)}</div>')

        self.doc_members(page, library, context)

        classes: List[TypeDecl] = []
        interfaces: List[TypeDecl] = []
        exceptions: List[TypeDecl] = []
        for decl in visible_types(library):
            if is_exception(decl):
                exceptions.append(decl)
            elif decl.is_class:
                classes.append(decl)
            else:
                interfaces.append(decl)

        self.doc_types(page, classes, "Classes")
        self.doc_types(page, interfaces, "Interfaces")
        self.doc_types(page, exceptions, "Exceptions")

        self._finish(
            page,
            f"{name} Library",
            [page.a(url, name)],
            library=library,
        )

        for decl in visible_types(library):
            self.doc_type(library, decl)

    def doc_types(self, page: OutputPage, types: Sequence[TypeDecl], header: str) -> None:
        if not types:
            return
        page.writeln(f"<h3>{header}</h3>")
        for decl in types:
            link = page.a(self.index.type_url(decl), f"<strong>{type_name(decl)}</strong>")
            page.writeln('<div class="type">')
            page.writeln(f"<h4>{link}</h4>")
            page.writeln("</div>")

    def doc_type(self, library: Library, decl: TypeDecl) -> None:
        self.logger.debug("- %s", decl.name)
        self.stats.types += 1
        context = ResolutionContext(library=library, type=decl)
        url = self.index.type_url(decl)
        library_name = html.escape(library.name)

        page = self.writer.open(url)
        page.writeln(f"<h2><strong>{type_name(decl, show_bounds=True)}</strong>")
        page.writeln(f"  {decl.kind}")
        page.writeln("</h2>")

        self.doc_code(page, decl.location, self._comment(page, decl.location, context))
        self.doc_inheritance(page, decl)
        self.doc_typedef(page, decl)
        self.doc_constructors(page, decl, context)
        self.doc_members(page, decl, context)

        self._finish(
            page,
            f"{type_name(decl)} {decl.kind} / {library_name} Library",
            [
                page.a(self.index.library_url(library), library_name),
                page.a(url, type_name(decl)),
            ],
            library=library,
            decl=decl,
        )

    # Type page sections

    def doc_inheritance(self, page: OutputPage, decl: TypeDecl) -> None:
        info = self.inheritance.analyze(decl)
        if info is None:
            return

        if decl.is_class:
            if info.superclasses:
                page.writeln("<h3>Extends</h3>")
                page.writeln("<p>")
                for ref in info.superclasses:
                    page.write(self._type_span(page, ref, decl))
                    page.write("&nbsp;&gt;&nbsp;")
                page.write(self._type_span(page, decl, decl))
                page.writeln("</p>")
            self._list_types(page, info.subclasses, "Subclasses", decl)
            self._list_types(page, info.implements, "Implements", decl)
            return

        if info.default_class is not None:
            self._list_types(page, [info.default_class], "Default class", decl)
        self._list_types(page, info.extends, "Extends", decl)
        self._list_types(page, info.subinterfaces, "Subinterfaces", decl)
        self._list_types(page, info.implementors, "Implemented by", decl)

    def doc_typedef(self, page: OutputPage, decl: TypeDecl) -> None:
        if not isinstance(decl, TypedefDecl):
            return
        anchor = html.escape(decl.name)
        renderer = TypeRenderer(self.index, page)
        page.writeln(f'<div class="method"><h4 id="{anchor}">')
        if self.config.include_source:
            page.writeln('<span class="show-code">Code</span>')
        if decl.definition is not None:
            page.write("typedef ")
            page.write(renderer.render(decl, decl.definition, decl.name))
            page.write(self._permalink(anchor, anchor))
        page.writeln("</h4>")
        self.doc_code(page, decl.location, None, show_code=True)
        page.writeln("</div>")

    def doc_constructors(self, page: OutputPage, decl: TypeDecl, context: ResolutionContext) -> None:
        constructors = visible_constructors(decl)
        if not constructors:
            return
        page.writeln("<h3>Constructors</h3>")
        for constructor in constructors:
            self.doc_method(page, decl, constructor, replace(context, member=constructor))

    def doc_members(self, page: OutputPage, host: Host, context: ResolutionContext) -> None:
        groups = visible_members(host)
        is_library = isinstance(host, Library)

        if groups.static_methods:
            page.writeln(f"<h3>{'Functions' if is_library else 'Static Methods'}</h3>")
            for method in groups.static_methods:
                self.doc_method(page, host, method, replace(context, member=method))

        if groups.static_fields:
            page.writeln(f"<h3>{'Variables' if is_library else 'Static Fields'}</h3>")
            for member in groups.static_fields:
                self.doc_field(page, host, member, replace(context, member=member))

        if groups.instance_methods:
            page.writeln("<h3>Methods</h3>")
            for method in groups.instance_methods:
                self.doc_method(page, host, method, replace(context, member=method))

        if groups.instance_fields:
            page.writeln("<h3>Fields</h3>")
            for member in groups.instance_fields:
                self.doc_field(page, host, member, replace(context, member=member))

    def doc_method(
        self, page: OutputPage, host: Host, method: Method, context: ResolutionContext
    ) -> None:
        """Document a function, accessor, operator or constructor."""
        self.stats.members += 1
        renderer = TypeRenderer(self.index, page)
        anchor = html.escape(self.index.member_anchor(method))

        page.writeln(f'<div class="method"><h4 id="{anchor}">')
        if self.config.include_source:
            page.writeln('<span class="show-code">Code</span>')

        if method.is_constructor:
            if method.is_factory:
                page.write("factory ")
            else:
                page.write("const " if method.is_const else "new ")
        else:
            page.write(renderer.render(host, method.return_type or DynamicType()))

        name = html.escape(method.name)
        if method.is_getter:
            name = f"get {name}"
        elif method.is_setter:
            name = f"set {name}"
        elif method.is_operator:
            name = f"operator {name}"
        page.write(f"<strong>{name}</strong>")

        if method.constructor_name:
            page.write(f".{html.escape(method.constructor_name)}")

        page.write(renderer.parameters(host, method.parameters))

        page.write(self._permalink(anchor, self._qualify(host, name)))
        page.writeln("</h4>")

        self.doc_code(page, method.location, self._comment(page, method.location, context), show_code=True)
        page.writeln("</div>")

    def doc_field(
        self, page: OutputPage, host: Host, member: Field, context: ResolutionContext
    ) -> None:
        self.stats.members += 1
        renderer = TypeRenderer(self.index, page)
        anchor = html.escape(self.index.member_anchor(member))
        name = html.escape(member.name)

        page.writeln(f'<div class="field"><h4 id="{anchor}">')
        if self.config.include_source:
            page.writeln('<span class="show-code">Code</span>')

        if member.is_final:
            page.write("final ")
        elif isinstance(member.type, DynamicType):
            page.write("var ")

        page.write(renderer.render(host, member.type))
        page.write(f"<strong>{name}</strong>")
        page.write(self._permalink(anchor, self._qualify(host, name)))
        page.writeln("</h4>")

        self.doc_code(page, member.location, self._comment(page, member.location, context), show_code=True)
        page.writeln("</div>")

    def doc_code(
        self,
        page: OutputPage,
        location: Optional[Location],
        comment: Optional[str],
        show_code: bool = False,
    ) -> None:
        """Write the rendered comment and, when enabled, the declaration's source."""
        include_code = (
            self.config.include_source and show_code and location is not None and bool(location.text)
        )
        if comment is None and not include_code:
            return
        page.writeln('<div class="doc">')
        if comment is not None:
            page.writeln(comment)
        if include_code:
            page.writeln('<pre class="source">')
            page.writeln(html.escape(unindent_code(location)))
            page.writeln("</pre>")
        page.writeln("</div>")

    # Helpers

    def _comment(
        self, page: OutputPage, location: Optional[Location], context: ResolutionContext
    ) -> Optional[str]:
        text = self.comments.find(location)
        if text is None:
            return None
        return self._render_comment(page, text, context)

    def _render_comment(self, page: OutputPage, text: str, context: ResolutionContext) -> str:
        return self.comment_renderer.to_html(
            text, lambda name: self.resolver.resolve(name, context, page)
        )

    def _type_span(self, page: OutputPage, ref: TypeRef, current: TypeDecl) -> str:
        """Inline box with an icon and the type's name, linked unless it is `current`."""
        decl = declaration_of(ref)
        if decl is None:
            raise TypeError(f"{ref!r} is not a type declaration")
        label = type_name(ref)
        if decl is current:
            body = f"<strong>{label}</strong>"
        elif self.index.is_linkable(ref):
            body = page.a(self.index.type_url(ref), label)
        else:
            body = label
        return f'<span class="type-box"><span class="icon-{type_icon(decl)}"></span>{body}</span>'

    def _list_types(
        self, page: OutputPage, refs: Sequence[TypeRef], header: str, current: TypeDecl
    ) -> None:
        spans = [
            self._type_span(page, ref, current)
            for ref in refs
            if declaration_of(ref) is not None and not declaration_of(ref).is_private
        ]
        if not spans:
            return
        page.writeln(f"<h3>{header}</h3>")
        page.writeln("<p>")
        page.write(", ".join(spans))
        page.writeln("</p>")

    @staticmethod
    def _qualify(host: Host, name: str) -> str:
        if isinstance(host, Library):
            return name
        return f"{type_name(host)}.{name}"

    @staticmethod
    def _permalink(anchor: str, title: str) -> str:
        return f' <a class="anchor-link" href="#{anchor}" title="Permalink to {title}">#</a>'

    def _finish(
        self,
        page: OutputPage,
        title: str,
        breadcrumbs: List[str],
        *,
        library: Optional[Library] = None,
        decl: Optional[TypeDecl] = None,
    ) -> None:
        site = self.config.site
        data_attributes = []
        if library is not None:
            data_attributes.append(("library", html.escape(library.name)))
        if decl is not None:
            data_attributes.append(("type", html.escape(type_name(decl))))
        if self.config.mode == MODE_LIVE_NAV:
            urls = json.dumps(self.navigation.library_urls())
            data_attributes.append(("library-urls", html.escape(urls)))

        if self.config.mode == MODE_STATIC:
            navigation = self.navigation.render_sidebar(page, library, decl)
        else:
            navigation = ""

        template = self._env.get_template(_LAYOUT_TEMPLATE)
        text = template.render(
            title=title,
            main_title=html.escape(site.title),
            root=page.relative(""),
            manifest_url=page.relative(APPCACHE_MANIFEST) if self.config.generate_app_cache else None,
            data_attributes=data_attributes,
            logo_link=page.a(site.main_url, '<div class="logo"></div>'),
            index_link=page.a(INDEX_PAGE, html.escape(site.title)),
            breadcrumbs=breadcrumbs,
            search_engine_id=html.escape(site.search_engine_id) if site.search_engine_id else None,
            search_results_url=page.relative(site.search_results_url),
            navigation=navigation,
            content=page.getvalue(),
            pre_footer=site.pre_footer_text,
            footer_items=self._footer_items(),
            client_script=client_script_name(self.config.mode),
        )
        self.writer.close(page, text)

    def _footer_items(self) -> List[str]:
        items: List[str] = []
        if not self.config.omit_generation_time:
            items.append(f"This page was generated at {self._clock():%Y-%m-%d %H:%M:%S}")
        if self.config.site.footer_text:
            items.append(self.config.site.footer_text)
        return items

    @staticmethod
    def _create_env(templates_dir: Path | None) -> Environment:
        directories: List[str] = []
        if templates_dir:
            directories.append(str(templates_dir))
        default_dir = str(Path(__file__).with_name("templates"))
        if default_dir not in directories:
            directories.append(default_dir)
        loader = FileSystemLoader(directories)
        return Environment(loader=loader, autoescape=False, trim_blocks=True, lstrip_blocks=True)


def unindent_code(location: Location) -> str:
    """Strip the declaration's own indentation from every line after the first."""
    lines = location.text.split("\n")
    for position in range(1, len(lines)):
        line = lines[position]
        strip = 0
        while strip < location.column and strip < len(line) and line[strip] in " \t":
            strip += 1
        lines[position] = line[strip:]
    return "\n".join(lines)


__all__ = ["APPCACHE_MANIFEST", "DocGenerator", "GenerationStats", "INDEX_PAGE", "client_script_name", "unindent_code"]

"""Tests for type rendering."""

from __future__ import annotations

from apidoc.models import DynamicType, FunctionType, Parameter, VoidType
from apidoc.pages import OutputPage
from apidoc.render.types import TypeRenderer, type_name
from apidoc.symbols import SymbolIndex
from tests._fixtures.snapshot_builder import SnapshotBuilder, field, klass, method, param, type_named


def _geo(builder: SnapshotBuilder) -> None:
    builder.library(
        "geo",
        types=[
            klass("Point"),
            klass("_Secret"),
            klass(
                "Box",
                type_variables=[{"name": "T", "bound": "geo.Point"}, {"name": "S"}],
                members=[
                    field("item", type="T"),
                    field("pairs", type={"type": "geo.Box", "arguments": ["geo.Point", "other.Thing"]}),
                ],
            ),
        ],
    )
    builder.library("other", types=[klass("Thing")])


def test_instantiation_contains_rendered_arguments(snapshot_builder: SnapshotBuilder) -> None:
    _geo(snapshot_builder)
    program = snapshot_builder.program()
    index = SymbolIndex(program, ["geo"])
    box = type_named(program, "geo.Box")
    renderer = TypeRenderer(index, OutputPage("geo/Box.html"))

    rendered = renderer.link(box, box.members["pairs"].type)

    assert rendered == (
        '<a href="../geo/Box.html">Box</a>&lt;<a href="../geo/Point.html">Point</a>, Thing&gt;'
    )


def test_private_and_out_of_scope_types_are_plain_text(snapshot_builder: SnapshotBuilder) -> None:
    _geo(snapshot_builder)
    program = snapshot_builder.program()
    index = SymbolIndex(program, ["geo"])
    renderer = TypeRenderer(index, OutputPage("geo.html"))
    library = program.libraries[0]

    assert renderer.link(library, type_named(program, "geo._Secret")) == "_Secret"
    assert renderer.link(library, type_named(program, "other.Thing")) == "Thing"
    assert renderer.link(library, type_named(program, "geo.Point")) == '<a href="geo/Point.html">Point</a>'


def test_type_variables_link_to_their_declaration(snapshot_builder: SnapshotBuilder) -> None:
    _geo(snapshot_builder)
    program = snapshot_builder.program()
    box = type_named(program, "geo.Box")
    renderer = TypeRenderer(SymbolIndex(program), OutputPage("geo/Box.html"))

    assert renderer.render(box, box.members["item"].type, "item") == '<a href="../geo/Box.html">T</a> item'


def test_keywords_and_untyped_parameters(snapshot_builder: SnapshotBuilder) -> None:
    _geo(snapshot_builder)
    program = snapshot_builder.program()
    renderer = TypeRenderer(SymbolIndex(program), OutputPage("geo.html"))
    library = program.libraries[0]

    assert renderer.render(library, VoidType()) == "void "
    assert renderer.render(library, DynamicType()) == ""
    assert renderer.render(library, DynamicType(), "value") == "value"
    assert renderer.link(library, DynamicType()) == "dynamic"


def test_parameter_list_brackets_optional_tail(snapshot_builder: SnapshotBuilder) -> None:
    snapshot_builder.library(
        "geo",
        types=[klass("Point")],
        members=[
            method(
                "scale",
                parameters=[
                    param("a"),
                    param("b", optional=True, default=1),
                    param("c", "geo.Point", optional=True),
                ],
            )
        ],
    )
    program = snapshot_builder.program()
    library = program.libraries[0]
    renderer = TypeRenderer(SymbolIndex(program), OutputPage("geo.html"))

    rendered = renderer.parameters(library, library.members["scale"].parameters)

    assert rendered == '(a, [b = 1, <a href="geo/Point.html">Point</a> c])'


def test_function_typed_parameters_render_inline(snapshot_builder: SnapshotBuilder) -> None:
    snapshot_builder.library("geo", types=[klass("Point")])
    program = snapshot_builder.program()
    library = program.libraries[0]
    point = type_named(program, "geo.Point")
    renderer = TypeRenderer(SymbolIndex(program), OutputPage("geo.html"))
    callback = FunctionType(return_type=VoidType(), parameters=[Parameter(name="p", type=point)])

    assert renderer.render(library, callback, "onMove") == 'void onMove(<a href="geo/Point.html">Point</a> p)'
    assert renderer.link(library, callback) == 'void Function(<a href="geo/Point.html">Point</a> p)'


def test_type_name_shows_bounds_on_request(snapshot_builder: SnapshotBuilder) -> None:
    _geo(snapshot_builder)
    program = snapshot_builder.program()
    box = type_named(program, "geo.Box")

    assert type_name(box) == "Box&lt;T, S&gt;"
    assert type_name(box, show_bounds=True) == "Box&lt;T extends Point, S&gt;"
    assert type_name(box.members["pairs"].type) == "Box&lt;Point, Thing&gt;"
    assert type_name(VoidType()) == "void"

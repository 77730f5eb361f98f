"""Tests for snapshot loading and linking."""

from __future__ import annotations

import json
from pathlib import Path

import pytest

from apidoc.mirrors import SnapshotError, load_program_data, load_snapshot
from apidoc.models import ClassDecl, FunctionType, TypeInstance, TypeVariable, TypedefDecl
from tests._fixtures.snapshot_builder import (
    SnapshotBuilder,
    field,
    interface,
    klass,
    method,
    param,
    type_named,
)


def test_classes_without_superclass_extend_synthesized_root(snapshot_builder: SnapshotBuilder) -> None:
    snapshot_builder.library("geo", types=[klass("Point")])

    program = snapshot_builder.program()
    point = type_named(program, "geo.Point")

    assert program.object_type is not None
    assert program.object_type.name == "Object"
    assert program.object_type.is_object
    assert program.object_type.library not in program.libraries
    assert isinstance(point, ClassDecl)
    assert point.superclass is program.object_type
    assert not point.is_object


def test_root_declared_in_snapshot_is_reused(snapshot_builder: SnapshotBuilder) -> None:
    snapshot_builder.library("core", types=[klass("Object")])
    snapshot_builder.library("geo", types=[klass("Point")])

    program = snapshot_builder.program()

    root = type_named(program, "core.Object")
    assert program.object_type is root
    assert root.superclass is None
    assert type_named(program, "geo.Point").superclass is root


def test_type_arguments_produce_instances(snapshot_builder: SnapshotBuilder) -> None:
    snapshot_builder.library(
        "geo",
        types=[
            klass("Point"),
            klass(
                "Box",
                type_variables=[{"name": "T", "bound": "geo.Point"}],
                members=[
                    field("item", type="T"),
                    method("copy", return_type={"type": "geo.Box", "arguments": ["geo.Point"]}),
                ],
            ),
        ],
    )

    program = snapshot_builder.program()
    box = type_named(program, "geo.Box")
    point = type_named(program, "geo.Point")

    variable = box.type_variables[0]
    assert variable.bound is point
    assert box.members["item"].type is variable
    assert isinstance(variable, TypeVariable)
    copy = box.members["copy"].return_type
    assert isinstance(copy, TypeInstance)
    assert copy.declaration is box
    assert copy.arguments == [point]


def test_accessors_and_constructors_are_keyed_separately(snapshot_builder: SnapshotBuilder) -> None:
    snapshot_builder.library(
        "geo",
        types=[
            klass(
                "Point",
                constructors=[
                    {"name": "", "parameters": [param("x"), param("y")]},
                    {"name": "origin", "const": True},
                ],
                members=[
                    method("x", getter=True, return_type="void"),
                    method("x", setter=True, parameters=[param("value")]),
                ],
            )
        ],
    )

    point = type_named(snapshot_builder.program(), "geo.Point")

    assert set(point.members) == {"x", "x="}
    assert point.members["x"].is_getter
    assert point.members["x="].is_setter
    assert set(point.constructors) == {"Point", "Point.origin"}
    assert point.constructors["Point.origin"].is_const
    assert [p.name for p in point.constructors["Point"].parameters] == ["x", "y"]


def test_library_members_are_static(snapshot_builder: SnapshotBuilder) -> None:
    snapshot_builder.library("geo", members=[method("distance"), field("epsilon", static=False)])

    library = snapshot_builder.program().libraries[0]

    assert all(member.is_static for member in library.members.values())


def test_typedef_definition_is_function_type(snapshot_builder: SnapshotBuilder) -> None:
    snapshot_builder.library(
        "events",
        types=[
            {
                "kind": "typedef",
                "name": "Handler",
                "definition": {"function": {"return_type": "void", "parameters": [param("event")]}},
            }
        ],
    )

    handler = type_named(snapshot_builder.program(), "events.Handler")

    assert isinstance(handler, TypedefDecl)
    assert isinstance(handler.definition, FunctionType)
    assert handler.kind == "Typedef"


def test_interfaces_link_default_class(snapshot_builder: SnapshotBuilder) -> None:
    snapshot_builder.library(
        "coll",
        types=[
            interface("Sequence", default_class="coll.ListImpl"),
            klass("ListImpl", interfaces=["coll.Sequence"]),
        ],
    )

    program = snapshot_builder.program()
    sequence = type_named(program, "coll.Sequence")

    assert sequence.default_class is type_named(program, "coll.ListImpl")
    assert type_named(program, "coll.ListImpl").interfaces == [sequence]


@pytest.mark.parametrize(
    "library",
    [
        {"name": "geo", "types": [klass("Point", superclass="geo.Missing")]},
        {"name": "geo", "types": [klass("Point"), klass("Point")]},
        {"name": "geo", "types": [{"kind": "mixin", "name": "Point"}]},
        {"name": "geo", "members": [{"kind": "property", "name": "x"}]},
        {"name": "geo", "types": [{"kind": "typedef", "name": "F", "definition": "void"}]},
    ],
)
def test_malformed_snapshots_raise(library: dict) -> None:
    with pytest.raises(SnapshotError):
        load_program_data({"libraries": [library]})


def test_load_snapshot_reads_json_and_yaml(tmp_path: Path) -> None:
    json_path = tmp_path / "program.json"
    json_path.write_text(json.dumps({"libraries": [{"name": "geo"}]}), encoding="utf-8")
    yaml_path = tmp_path / "program.yaml"
    yaml_path.write_text("libraries:\n  - name: geo\n    types:\n      - name: Point\n", encoding="utf-8")

    assert [lib.name for lib in load_snapshot(json_path).libraries] == ["geo"]
    assert list(load_snapshot(yaml_path).libraries[0].types) == ["Point"]


def test_load_snapshot_reports_missing_and_invalid_files(tmp_path: Path) -> None:
    with pytest.raises(SnapshotError):
        load_snapshot(tmp_path / "missing.json")

    broken = tmp_path / "broken.json"
    broken.write_text("{not json", encoding="utf-8")
    with pytest.raises(SnapshotError):
        load_snapshot(broken)

    listing = tmp_path / "list.yml"
    listing.write_text("- geo\n", encoding="utf-8")
    with pytest.raises(SnapshotError):
        load_snapshot(listing)

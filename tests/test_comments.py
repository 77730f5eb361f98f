"""Tests for locating doc comments in source files."""

from __future__ import annotations

from apidoc.comments import CommentMap
from apidoc.models import Location
from tests._fixtures.snapshot_builder import SnapshotBuilder


def _location(builder: SnapshotBuilder, source: str, snippet: str) -> Location:
    raw = builder.locate(source, snippet)
    return Location(source=raw["source"], offset=raw["offset"], column=raw["column"])


def test_block_comment_gutters_are_stripped(snapshot_builder: SnapshotBuilder) -> None:
    source = snapshot_builder.write(
        "lib/geo.dart",
        """
        /**
         * A point in the plane.
         *
         * Immutable.
         */
        class Point {}
        """,
    )

    comments = CommentMap(snapshot_builder.root)

    assert comments.find(_location(snapshot_builder, source, "class Point")) == (
        "A point in the plane.\n\nImmutable."
    )


def test_line_comment_runs_are_joined(snapshot_builder: SnapshotBuilder) -> None:
    source = snapshot_builder.write(
        "lib/geo.dart",
        """
        class Point {
          /// Horizontal offset.
          /// Never negative.
          final x;
        }
        """,
    )

    comments = CommentMap(snapshot_builder.root)

    assert comments.find(_location(snapshot_builder, source, "final x")) == (
        "Horizontal offset.\nNever negative."
    )


def test_plain_comments_between_are_skipped(snapshot_builder: SnapshotBuilder) -> None:
    source = snapshot_builder.write(
        "lib/geo.dart",
        """
        /** Distance between points. */
        // TODO(someone): cache this.
        num distance(a, b) => 0;
        """,
    )

    comments = CommentMap(snapshot_builder.root)

    assert comments.find(_location(snapshot_builder, source, "num distance")) == (
        "Distance between points."
    )


def test_only_the_closest_doc_comment_is_attached(snapshot_builder: SnapshotBuilder) -> None:
    source = snapshot_builder.write(
        "lib/geo.dart",
        """
        /** Stale. */
        /** Current. */
        class Point {}
        """,
    )

    comments = CommentMap(snapshot_builder.root)

    assert comments.find(_location(snapshot_builder, source, "class Point")) == "Current."


def test_library_comment_precedes_directive(snapshot_builder: SnapshotBuilder) -> None:
    source = snapshot_builder.write(
        "lib/geo.dart",
        """
        /// Geometry primitives.
        library geo;

        /** A point. */
        class Point {}
        """,
    )

    comments = CommentMap(snapshot_builder.root)

    assert comments.find_library(source) == "Geometry primitives."


def test_missing_sources_and_locations_yield_nothing(snapshot_builder: SnapshotBuilder) -> None:
    comments = CommentMap(snapshot_builder.root)

    assert comments.find(None) is None
    assert comments.find(Location(source="lib/missing.dart", offset=3)) is None
    assert comments.find_library("lib/missing.dart") is None
    assert comments.find_library(None) is None


def test_sources_are_parsed_once(snapshot_builder: SnapshotBuilder) -> None:
    source = snapshot_builder.write("lib/geo.dart", "/** First. */\nclass Point {}\n")
    comments = CommentMap(snapshot_builder.root)
    location = _location(snapshot_builder, source, "class Point")

    assert comments.find(location) == "First."
    (snapshot_builder.root / source).write_text("/** Second. */\nclass Point {}\n", encoding="utf-8")

    assert comments.find(location) == "First."

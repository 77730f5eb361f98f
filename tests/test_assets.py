"""Tests for output directory and asset handling."""

from __future__ import annotations

import subprocess
from pathlib import Path

import pytest

from apidoc.assets import (
    CLIENT_DIR,
    STATIC_DIR,
    clean_output_directory,
    compile_client_script,
    copy_static_files,
)
from apidoc.config import MODE_LIVE_NAV, MODE_STATIC


def test_clean_output_directory_removes_previous_output(tmp_path: Path) -> None:
    out = tmp_path / "docs"
    (out / "old").mkdir(parents=True)
    (out / "old" / "page.html").write_text("stale", encoding="utf-8")

    clean_output_directory(out)

    assert out.is_dir()
    assert list(out.iterdir()) == []


def test_clean_output_directory_creates_missing_directory(tmp_path: Path) -> None:
    out = tmp_path / "nested" / "docs"

    clean_output_directory(out)

    assert out.is_dir()


@pytest.mark.parametrize(("mode", "name"), [(MODE_STATIC, "client-static.js"), (MODE_LIVE_NAV, "client-live-nav.js")])
def test_bundled_client_script_is_copied(tmp_path: Path, mode: str, name: str) -> None:
    output = compile_client_script(mode, tmp_path)

    assert output == tmp_path / name
    assert output.read_bytes() == (CLIENT_DIR / name).read_bytes()


def test_compiler_command_receives_placeholders(tmp_path: Path) -> None:
    calls = []

    def runner(args, check=False, capture_output=False, text=False):
        calls.append((list(args), check))
        return subprocess.CompletedProcess(args, 0)

    output = compile_client_script(
        MODE_LIVE_NAV,
        tmp_path,
        ["jsc", "--out={output}", "{source}"],
        runner=runner,
    )

    assert output == tmp_path / "client-live-nav.js"
    assert calls == [
        (["jsc", f"--out={tmp_path / 'client-live-nav.js'}", str(CLIENT_DIR / "client-live-nav.js")], True)
    ]


def test_compiler_failures_propagate(tmp_path: Path) -> None:
    def runner(args, check=False, capture_output=False, text=False):
        raise subprocess.CalledProcessError(1, args)

    with pytest.raises(subprocess.CalledProcessError):
        compile_client_script(MODE_STATIC, tmp_path, ["jsc", "{source}"], runner=runner)


def test_unknown_mode_is_rejected(tmp_path: Path) -> None:
    with pytest.raises(ValueError):
        compile_client_script("fancy", tmp_path)


def test_static_copy_skips_hidden_files_and_directories(tmp_path: Path) -> None:
    source = tmp_path / "static"
    (source / "fonts").mkdir(parents=True)
    (source / "styles.css").write_text("body {}", encoding="utf-8")
    (source / "favicon.ico").write_bytes(b"\x00\x01")
    (source / ".DS_Store").write_text("junk", encoding="utf-8")
    (source / "fonts" / "mono.woff").write_bytes(b"font")
    out = tmp_path / "out"
    out.mkdir()

    copied = copy_static_files(source, out)

    assert copied == [out / "favicon.ico", out / "styles.css"]
    assert sorted(path.name for path in out.iterdir()) == ["favicon.ico", "styles.css"]
    assert (out / "favicon.ico").read_bytes() == b"\x00\x01"


def test_bundled_static_files_include_stylesheet() -> None:
    assert (STATIC_DIR / "styles.css").is_file()

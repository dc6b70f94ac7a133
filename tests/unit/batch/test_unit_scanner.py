# tests/unit/batch/test_unit_scanner.py — v1
"""Tests for batch/scanner.py — input discovery."""

from __future__ import annotations

from m2md.batch.scanner import discover_images, resolve_file_args


def _touch(path):
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_bytes(b"x")
    return path


class TestDiscoverImages:
    def test_files_and_directories(self, tmp_path):
        a = _touch(tmp_path / "a.png")
        b = _touch(tmp_path / "dir" / "b.JPG")
        _touch(tmp_path / "dir" / "notes.txt")
        _touch(tmp_path / "dir" / "sub" / "c.webp")

        found = discover_images([a, tmp_path / "dir"])
        assert found == sorted([a.resolve(), b.resolve()])

    def test_recursive(self, tmp_path):
        _touch(tmp_path / "a.gif")
        deep = _touch(tmp_path / "x" / "y" / "z.jpeg")
        found = discover_images([tmp_path], recursive=True)
        assert deep.resolve() in found
        assert len(found) == 2

    def test_duplicates_collapsed(self, tmp_path):
        a = _touch(tmp_path / "a.png")
        assert discover_images([a, tmp_path, str(a)]) == [a.resolve()]

    def test_missing_and_unsupported_skipped(self, tmp_path):
        _touch(tmp_path / "doc.pdf")
        assert discover_images([tmp_path / "nope.png", tmp_path / "doc.pdf"]) == []


class TestResolveFileArgs:
    def test_rejoins_split_name(self, tmp_path):
        _touch(tmp_path / "Screenshot 2026-02-13 at 17.07.21.png")
        parts = f"{tmp_path}/Screenshot 2026-02-13 at 17.07.21.png".split(" ")
        assert resolve_file_args(parts) == [" ".join(parts)]

    def test_existing_args_unchanged(self, tmp_path):
        a = _touch(tmp_path / "a.png")
        args = [str(a), "missing.png"]
        assert resolve_file_args(args) == args

    def test_single_arg_unchanged(self):
        assert resolve_file_args(["x y"]) == ["x y"]

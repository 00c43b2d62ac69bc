"""Tests for delete/move/copy/create_directory."""

from conftest import write_numbered


class TestCreateDirectory:
    def test_nested(self, registry, workdir):
        res = registry.execute("create_directory", ["a/b/c"])
        assert res.status == "success"
        assert (workdir / "a" / "b" / "c").is_dir()

    def test_exists(self, registry, workdir):
        (workdir / "a").mkdir()
        assert registry.execute("create_directory", ["a"]).error_kind == "PathAlreadyExists"


class TestCopy:
    def test_file(self, registry, workdir):
        (workdir / "a.txt").write_text("hi\n")
        registry.execute("copy_path", ["a.txt", "sub/b.txt"])
        assert (workdir / "sub" / "b.txt").read_text() == "hi\n"
        assert (workdir / "a.txt").exists()

    def test_directory_needs_recursive(self, registry, workdir):
        (workdir / "d").mkdir()
        (workdir / "d" / "x").write_text("x")
        res = registry.execute("copy_path", ["d", "e"])
        assert res.error_kind == "InvalidArguments"
        assert "recursive" in res.message
        registry.execute("copy_path", {"source": "d", "destination": "e", "recursive": True})
        assert (workdir / "e" / "x").read_text() == "x"

    def test_destination_exists(self, registry, workdir):
        (workdir / "a").write_text("1")
        (workdir / "b").write_text("2")
        assert registry.execute("copy_path", ["a", "b"]).error_kind == "PathAlreadyExists"
        assert (workdir / "b").read_text() == "2"


class TestMove:
    def test_rename_tracks_open_file(self, registry, workdir):
        write_numbered(workdir / "a.txt", 10)
        registry.execute("open", ["a.txt"])
        res = registry.execute("move_path", ["a.txt", "b.txt"])
        assert res.status == "success"
        assert not (workdir / "a.txt").exists()
        assert registry.state.open_file == workdir / "b.txt"
        assert registry.execute("goto", [5]).status == "success"

    def test_move_directory_with_open_file(self, registry, workdir):
        write_numbered(workdir / "pkg" / "m.py", 3)
        registry.execute("open", ["pkg/m.py"])
        registry.execute("move_path", ["pkg", "lib/pkg"])
        assert registry.state.open_file == workdir / "lib" / "pkg" / "m.py"

    def test_missing_source(self, registry):
        assert registry.execute("move_path", ["nope", "x"]).error_kind == "PathNotFound"


class TestDelete:
    def test_delete_open_file_closes_it(self, registry, workdir):
        write_numbered(workdir / "a.txt", 10)
        registry.execute("open", ["a.txt"])
        res = registry.execute("delete_path", ["a.txt"])
        assert res.data["closed_open_file"] is True
        assert registry.state.open_file is None
        assert registry.state.view_window is None

    def test_non_empty_directory(self, registry, workdir):
        (workdir / "d").mkdir()
        (workdir / "d" / "x").write_text("x")
        res = registry.execute("delete_path", ["d"])
        assert res.error_kind == "InvalidArguments"
        assert (workdir / "d" / "x").exists()
        assert registry.execute("delete_path", ["d", True]).status == "success"
        assert not (workdir / "d").exists()

    def test_refuses_working_directory(self, registry, workdir):
        res = registry.execute("delete_path", {"path": ".", "recursive": True})
        assert res.error_kind == "InvalidArguments"
        assert workdir.exists()

    def test_missing(self, registry):
        assert registry.execute("delete_path", ["ghost"]).error_kind == "PathNotFound"

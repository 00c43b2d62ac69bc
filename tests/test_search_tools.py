"""Tests for find_file, search_file and search_dir."""

import pytest

from conftest import write_numbered


@pytest.fixture
def tree(workdir):
    (workdir / "src").mkdir()
    (workdir / "src" / "app.py").write_text("import os\nTODO = 1\nprint(TODO)\n")
    (workdir / "src" / "util.py").write_text("def helper():\n    pass\n")
    (workdir / "README.md").write_text("TODO: write docs\n")
    (workdir / "node_modules" / "dep").mkdir(parents=True)
    (workdir / "node_modules" / "dep" / "index.py").write_text("TODO\n")
    (workdir / ".hidden").mkdir()
    (workdir / ".hidden" / "secret.py").write_text("TODO\n")
    (workdir / "logo.png").write_bytes(b"\x89PNG\0TODO")
    return workdir


class TestFindFile:
    def test_glob_by_name(self, registry, tree):
        res = registry.execute("find_file", ["*.py"])
        assert res.data["matches"] == ["src/app.py", "src/util.py"]
        assert 'Found 2 matches for "*.py" in .:' in res.message

    def test_scoped_to_dir(self, registry, tree):
        res = registry.execute("find_file", {"file_name": "app.py", "dir": "src"})
        assert res.data["matches"] == ["src/app.py"]

    def test_no_match(self, registry, tree):
        res = registry.execute("find_file", ["*.rs"])
        assert res.status == "success"
        assert res.message.startswith("No matches found")

    def test_missing_dir(self, registry, tree):
        assert registry.execute("find_file", ["*.py", "lib"]).error_kind == "PathNotFound"


class TestSearchFile:
    def test_explicit_file(self, registry, tree):
        res = registry.execute("search_file", {"search_term": "TODO", "file": "src/app.py"})
        assert [m["line"] for m in res.data["matches"]] == [2, 3]
        assert "Line 2: TODO = 1" in res.message

    def test_defaults_to_open_file(self, registry, workdir):
        write_numbered(workdir / "a.txt", 30)
        registry.execute("open", ["a.txt"])
        res = registry.execute("search_file", [r"line 2\d"])
        assert len(res.data["matches"]) == 10
        assert res.data["file"] == "a.txt"

    def test_no_file_and_nothing_open(self, registry):
        res = registry.execute("search_file", ["x"])
        assert res.error_kind == "OutOfRange"
        assert "open" in res.message

    def test_bad_regex(self, registry, tree):
        res = registry.execute("search_file", {"search_term": "(", "file": "README.md"})
        assert res.error_kind == "InvalidArguments"
        assert "search_term" in res.message

    def test_result_cap(self, workdir):
        from pycats.config.models import EngineConfig
        from pycats.tools.builtin import create_tool_registry

        reg = create_tool_registry(workdir, config=EngineConfig(max_search_results=3))
        write_numbered(workdir / "a.txt", 20)
        res = reg.execute("search_file", {"search_term": "line", "file": "a.txt"})
        assert len(res.data["matches"]) == 3
        assert res.data["truncated"] is True


class TestSearchDir:
    def test_counts_per_file(self, registry, tree):
        res = registry.execute("search_dir", ["TODO"])
        assert res.data["files"] == {"README.md": 1, "src/app.py": 2}
        assert res.data["total"] == 3
        assert "src/app.py (2 matches)" in res.message
        assert res.message.endswith('End of matches for "TODO" in .')

    def test_no_match(self, registry, tree):
        res = registry.execute("search_dir", {"search_term": "nothing-here", "dir": "src"})
        assert res.data["files"] == {}
        assert "No matches found" in res.message

    def test_dir_is_a_file(self, registry, tree):
        res = registry.execute("search_dir", {"search_term": "x", "dir": "README.md"})
        assert res.error_kind == "InvalidArguments"

"""A short agent session driven through the registry."""

from conftest import write_numbered


def _snapshot_tree(root):
    return sorted(str(p.relative_to(root)) for p in root.rglob("*"))


def test_session(registry, workdir):
    write_numbered(workdir / "big.py", 500)

    res = registry.execute("open", {"path": "big.py"})
    assert res.data["window"] == {"start": 1, "end": 50, "size": 50}

    res = registry.execute("goto", {"line_number": 500})
    assert res.data["window"] == {"start": 451, "end": 500, "size": 50}

    before = _snapshot_tree(workdir)
    res = registry.execute("run_command", {"command": "rm -rf /"})
    assert res.is_error
    assert res.error_kind == "CommandRejected"
    assert _snapshot_tree(workdir) == before
    assert (workdir / "big.py").exists()

    res = registry.execute("run_command", {"command": "echo hello"})
    assert res.status == "success"
    assert res.data["exit_code"] == 0
    assert res.data["stdout"] == "hello\n"
    assert "EXIT_CODE: 0" in res.message

    res = registry.execute("run_command", {"command": "exit 2"})
    assert res.status == "success"
    assert res.data["exit_code"] == 2

    res = registry.execute("run_command", {"command": "sleep 5", "timeout": 1})
    assert res.error_kind == "Timeout"

    # the rejected and timed-out commands did not disturb navigation
    w = registry.state.view_window
    assert (w.start, w.end) == (451, 500)
    assert [h.tool for h in registry.state.history] == [
        "open", "goto", "run_command", "run_command", "run_command", "run_command",
    ]

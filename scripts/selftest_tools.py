from __future__ import annotations
import tempfile
from pathlib import Path

from pycats.tools.builtin import create_tool_registry


def main():
    with tempfile.TemporaryDirectory() as td:
        cwd = Path(td)
        reg = create_tool_registry(cwd)

        def show(name, args=None):
            res = reg.execute(name, args)
            print(f"--- {name} [{res.status}]")
            print(res.message)

        show("create_file", {"path": "a.txt", "content": "".join(f"line {i}\n" for i in range(1, 121))})
        show("open", ["a.txt"])
        show("goto", [100])
        show("scroll_up")
        show("search_file", ["line 1[0-9]$"])
        show("replace_text", {"path": "a.txt", "old_text": "line 7\n", "new_text": "LINE SEVEN\n", "occurrence": 1})
        show("edit", {"path": "a.txt", "start_line": 100, "end_line": 101, "new_text": "hundred"})
        show("insert_text", {"path": "a.txt", "line_number": 1, "text": "header", "position": "before_line"})
        show("delete_line", {"path": "a.txt", "start_line": 2, "end_line": 3})
        show("create_file", {"path": "m.py", "content": "def f():\n" + "".join(f"    x{i} = {i}\n" for i in range(8))})
        show("filemap", ["m.py"])
        show("find_file", ["*.txt"])
        show("search_dir", ["SEVEN"])
        show("run_command", {"command": "echo hello"})
        show("run_command", {"command": "rm -rf /"})
        show("_state")


if __name__ == "__main__":
    main()

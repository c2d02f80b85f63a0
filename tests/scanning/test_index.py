"""Tests for the filesystem index."""

import os

from shipscore.scanning import build_index


class TestBuildIndex:
    """One sorted, depth-first walk with skip rules."""

    def test_preorder_sorted_walk(self, make_index):
        index = make_index({"b.js": "", "a/z.js": "", "a/b/c.js": "", "c.txt": ""})
        assert [e.path for e in index] == ["a/b/c.js", "a/z.js", "b.js", "c.txt"]

    def test_entry_attributes(self, make_index):
        index = make_index({"src/lib/util.test.ts": ""})
        entry = index.entries[0]
        assert entry.name == "util.test.ts"
        assert entry.extension == ".ts"
        assert entry.depth == 2

    def test_skips_dependency_and_hidden_directories(self, make_index):
        index = make_index(
            {
                "node_modules/react/index.js": "",
                "vendor/lib.py": "",
                ".git/config": "",
                ".venv/lib/site.py": "",
                "src/main.py": "",
            }
        )
        assert [e.path for e in index] == ["src/main.py"]

    def test_hidden_files_are_indexed(self, make_index):
        index = make_index({".env": "A=1", ".gitignore": "node_modules", "app.js": ""})
        assert index.exists(".env")
        assert index.exists(".gitignore")

    def test_symlinks_are_excluded(self, make_repo, tmp_path):
        outside = tmp_path / "secret.js"
        outside.write_text("sk_live")
        root = make_repo({"app.js": ""})
        os.symlink(outside, root / "linked.js")
        os.symlink(tmp_path, root / "linked_dir")

        index = build_index(root)

        assert [e.path for e in index] == ["app.js"]
        assert index.read_text("linked.js") == ""

    def test_max_files_truncates(self, make_index):
        index = make_index({f"f{i:02d}.txt": "" for i in range(10)}, max_files=3)
        assert len(index) == 3
        assert index.truncated

    def test_empty_tree(self, make_index):
        index = make_index({})
        assert len(index) == 0
        assert not index.truncated


class TestStructureQueries:
    def test_exists_for_files_and_directories(self, make_index):
        index = make_index({"prisma/schema.prisma": ""})
        assert index.exists("prisma/schema.prisma")
        assert index.exists("prisma")
        assert index.exists("/prisma/")
        assert not index.exists("schema.prisma")

    def test_find_by_extension_and_name(self, make_index):
        index = make_index({"server.js": "", "utils.js": "", "main.py": "", "style.css": ""})
        assert index.find([".css"]) == ("style.css",)
        assert index.find([".js", ".py"], ["server", "main"]) == ("main.py", "server.js")

    def test_find_skips_non_indexed_paths(self, make_index):
        index = make_index({"node_modules/x/server.js": ""})
        assert index.find([".js"]) == ()


class TestContentQueries:
    """Case-insensitive, bounded substring search."""

    def test_case_insensitive(self, make_index):
        index = make_index({"app.py": "from flask import Flask"})
        assert index.content_contains("FLASK")

    def test_only_searches_content_extensions(self, make_index):
        index = make_index({"notes.md": "express()", "style.css": "express()"})
        assert not index.content_contains("express()")

    def test_respects_file_scan_cap(self, make_index):
        index = make_index({"a.js": "", "b.js": "", "c.js": "marker"}, file_scan_cap=2)
        assert not index.content_contains("marker")
        assert index.content_contains("marker", file_scan_cap=3)

    def test_contains_any(self, make_index):
        index = make_index({"a.js": "app.listen(3000)"})
        assert index.content_contains_any(["fastify()", "app.listen"])
        assert not index.content_contains_any([])

    def test_contains_all_across_files(self, make_index):
        index = make_index({"login.js": "function login() {}", "form.html": "<input type=password>"})
        assert index.content_contains_all(["login", "password"])
        assert not index.content_contains_all(["login", "oauth"])

    def test_extension_filter(self, make_index):
        index = make_index({"a.py": "needle", "b.js": ""})
        assert not index.content_contains("needle", extensions=[".js"])


class TestReading:
    def test_read_text_is_bounded(self, make_index):
        index = make_index({"big.js": "x" * 100}, max_read_bytes=10)
        assert index.read_text("big.js") == "x" * 10

    def test_read_text_replaces_invalid_utf8(self, make_index):
        index = make_index({"bin.js": b"ok\xff"})
        assert index.read_text("bin.js").startswith("ok")

    def test_read_text_of_unindexed_path_is_empty(self, make_index):
        index = make_index({"node_modules/pkg/index.js": "code"})
        assert index.read_text("node_modules/pkg/index.js") == ""
        assert index.read_text("missing.js") == ""

    def test_read_json_returns_object(self, make_index):
        index = make_index({"package.json": {"name": "demo"}})
        assert index.read_json("package.json") == {"name": "demo"}

    def test_read_json_malformed_or_non_object(self, make_index):
        index = make_index({"bad.json": "{not json", "list.json": "[1, 2]"})
        assert index.read_json("bad.json") == {}
        assert index.read_json("list.json") == {}
        assert index.read_json("missing.json") == {}

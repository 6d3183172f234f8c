"""Tests for the specbook command line."""

import json

import pytest

from helpers import make_detail
from specbook.cli import build_parser, main
from specbook.mapping.mapping_store import MappingStore
from specbook.mapping.models import MappingSnapshot
from specbook.analysis.models import AnalysisResult


def run(capsys, workspace, *argv):
    code = main(["--workspace", str(workspace.root), *argv])
    captured = capsys.readouterr()
    return code, captured.out, captured.err


class TestCli:
    """Test suite for the CLI commands."""

    def test_parser_requires_command(self):
        with pytest.raises(SystemExit):
            build_parser().parse_args([])

    def test_add_and_tree(self, capsys, workspace):
        code, out, _ = run(capsys, workspace, "add", "Auth", "--id", "auth", "--content", "Sign in")
        assert code == 0
        assert out.strip() == "auth"

        code, out, _ = run(capsys, workspace, "add", "Login", "--id", "login", "--parent", "auth", "--completed")
        assert code == 0

        code, out, _ = run(capsys, workspace, "tree")
        tree = json.loads(out)
        assert tree[0]["id"] == "auth"
        assert tree[0]["hasContent"] is True
        assert tree[0]["children"][0]["completed"] is True
        assert "children" not in tree[0]["children"][0]

    def test_add_generates_id(self, capsys, workspace):
        code, out, _ = run(capsys, workspace, "add", "Anything")
        assert code == 0
        assert len(out.strip()) == 36

    def test_show_and_update(self, capsys, store, workspace):
        store.add_node(make_detail("x", "Old", content="body"))

        code, out, _ = run(capsys, workspace, "update", "x", "--title", "New", "--completed")
        assert code == 0
        assert json.loads(out)["title"] == "New"

        code, out, _ = run(capsys, workspace, "show", "x")
        detail = json.loads(out)
        assert detail["title"] == "New"
        assert detail["completed"] is True
        assert detail["content"] == "body"

    def test_show_missing(self, capsys, workspace):
        code, _, err = run(capsys, workspace, "show", "ghost")
        assert code == 1
        assert "ghost" in err

    def test_move_cycle_reports_error(self, capsys, populated_store, workspace):
        code, _, err = run(capsys, workspace, "move", "root", "--parent", "a1")
        assert code == 1
        assert "descendant" in err

    def test_move_to_root(self, capsys, populated_store, workspace):
        code, _, _ = run(capsys, workspace, "move", "a1")
        assert code == 0
        assert populated_store.read_detail("a1").parent_id is None

    def test_delete(self, capsys, populated_store, workspace):
        code, out, _ = run(capsys, workspace, "delete", "a")
        assert code == 0
        assert sorted(json.loads(out)["removed"]) == ["a", "a1"]

    def test_update_missing_object(self, capsys, workspace):
        code, _, err = run(capsys, workspace, "update", "ghost", "--title", "x")
        assert code == 1
        assert "Object ghost not found." in err

    def test_mapping_prints_snapshot(self, capsys, workspace):
        code, out, _ = run(capsys, workspace, "mapping")
        assert code == 0
        assert json.loads(out) is None

        MappingStore(workspace).write(MappingSnapshot(entries=[AnalysisResult(object_id="a")]))
        code, out, _ = run(capsys, workspace, "mapping")
        assert json.loads(out)["entries"][0]["objectId"] == "a"

    def test_unreadable_content_file(self, capsys, store, workspace, tmp_path):
        store.add_node(make_detail("x", "Old", content="body"))
        missing = tmp_path / "no-such-body.md"

        code, _, err = run(capsys, workspace, "update", "x", "--content-file", str(missing))

        assert code == 1
        assert "Error:" in err
        assert "no-such-body.md" in err
        assert store.read_detail("x").content == "body"

    def test_add_from_content_file(self, capsys, workspace, tmp_path):
        body = tmp_path / "body.md"
        body.write_text("# From file\n", encoding="utf-8")

        code, out, _ = run(capsys, workspace, "add", "Filed", "--id", "f", "--content-file", str(body))
        assert code == 0

        code, out, _ = run(capsys, workspace, "show", "f")
        assert json.loads(out)["content"] == "# From file\n"

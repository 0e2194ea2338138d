"""Unit tests for the core data model."""

from pathlib import Path

import pytest

from sapling.core.errors import ErrorKind, InvalidSettingsError, SaplingError
from sapling.core.types import Settings, Snapshot, Tree, TreeNode


def make_tree() -> Tree:
    leaf = TreeNode(file_path="/app/src/utils.js", name="utils.js", import_path="./utils", depth=2)
    header = TreeNode(
        file_path="/app/src/Header.jsx",
        name="Header",
        import_path="./Header",
        depth=1,
        is_component=True,
        children=[leaf],
    )
    broken = TreeNode(
        file_path="/app/src/Missing",
        name="Missing",
        import_path="./Missing",
        depth=1,
        error=ErrorKind.FILE_NOT_FOUND,
        error_message="cannot find './Missing'",
    )
    root = TreeNode(file_path="/app/src/App.jsx", name="App", expanded=True, children=[header, broken])
    return Tree(entry_file_path="/app/src/App.jsx", root=root)


class TestSettings:
    def test_defaults(self):
        settings = Settings()
        assert settings.use_alias is False
        assert settings.app_root == ""
        assert settings.webpack_config == ""
        assert settings.ts_config == ""
        assert settings.include_non_components is True

    def test_host_record_is_camel_case(self):
        record = Settings(app_root="/app", ts_config="tsconfig.json").to_dict()
        assert record == {
            "useAlias": False,
            "appRoot": "/app",
            "webpackConfig": "",
            "tsConfig": "tsconfig.json",
            "includeNonComponents": True,
        }

    def test_accepts_both_spellings(self):
        assert Settings(useAlias=True).use_alias is True
        assert Settings(use_alias=True).use_alias is True

    def test_field_for_key(self):
        assert Settings.field_for_key("tsConfig") == "ts_config"
        assert Settings.field_for_key("ts_config") == "ts_config"
        assert Settings.field_for_key("colour") is None

    def test_resolve_path_relative_to_app_root(self):
        settings = Settings(app_root="/app")
        assert settings.resolve_path("tsconfig.json") == Path("/app/tsconfig.json")
        assert settings.resolve_path("/etc/webpack.js") == Path("/etc/webpack.js")

    def test_assignment_is_validated(self):
        settings = Settings()
        with pytest.raises(ValueError):
            settings.use_alias = "sometimes"


class TestTree:
    def test_iter_nodes_preorder(self):
        tree = make_tree()
        names = [n.name for n in tree.iter_nodes()]
        assert names == ["App", "Header", "utils.js", "Missing"]

    def test_find_node(self):
        tree = make_tree()
        header = tree.root.children[0]
        assert tree.find_node(header.id) is header
        assert tree.find_node("nonexistent") is None

    def test_nodes_for_file(self):
        tree = make_tree()
        assert [n.name for n in tree.nodes_for_file("/app/src/utils.js")] == ["utils.js"]

    def test_ids_are_unique(self):
        tree = make_tree()
        ids = [n.id for n in tree.iter_nodes()]
        assert len(ids) == len(set(ids))

    def test_expanded_state(self):
        tree = make_tree()
        state = tree.expanded_state()
        assert state[tree.root.id] is True
        assert state[tree.root.children[0].id] is False

    def test_restore_from_host_record(self):
        tree = make_tree()
        record = tree.to_dict()

        assert record["entryFilePath"] == "/app/src/App.jsx"
        assert record["root"]["children"][1]["error"] == "FileNotFound"
        assert record["root"]["children"][0]["isComponent"] is True

        restored = Tree.model_validate(record)
        assert restored == tree
        assert restored.root.children[1].error is ErrorKind.FILE_NOT_FOUND

    def test_snapshot_without_tree(self):
        snapshot = Snapshot(settings=Settings(app_root="/app"))
        assert snapshot.to_dict()["tree"] is None


class TestErrors:
    def test_error_carries_kind_and_message(self):
        error = InvalidSettingsError("appRoot is not set")
        assert isinstance(error, SaplingError)
        assert error.kind is ErrorKind.INVALID_SETTINGS
        assert error.message == "appRoot is not set"
        assert str(error) == "InvalidSettings: appRoot is not set"

"""
Unit tests for the tree store.
"""

import threading
import time
from pathlib import Path
from unittest.mock import MagicMock, patch

import pytest

from sapling.config import SETTINGS_STATE_KEY, TREE_STATE_KEY
from sapling.core.errors import InvalidSettingsError, NoEntryFileError
from sapling.core.settings import settings_problems
from sapling.core.storage import MemoryStateStore, SQLiteStateStore
from sapling.core.types import Settings, Snapshot
from sapling.tree.builder import TreeBuilder
from sapling.tree.store import TreeStore


@pytest.fixture
def state():
    return MemoryStateStore()


@pytest.fixture
def store(react_app, state):
    return TreeStore(state=state, workspace_root=react_app)


@pytest.fixture
def parsed(store, react_app):
    store.set_entry_file(react_app / "src/index.jsx")
    store.parse()
    return store


class TestConstruction:
    def test_defaults_to_workspace_root(self, store, react_app):
        assert store.settings == Settings(app_root=str(react_app))
        assert store.get_tree() is None
        assert store.entry_file is None

    def test_loads_persisted_state(self, react_app, state):
        first = TreeStore(state=state, workspace_root=react_app)
        first.update_settings("includeNonComponents", False)
        first.set_entry_file(react_app / "src/index.jsx")
        tree = first.parse().tree

        second = TreeStore(state=state, workspace_root=react_app)
        assert second.settings.include_non_components is False
        assert second.get_tree() == tree
        assert second.entry_file == react_app / "src/index.jsx"

    def test_corrupt_state_is_ignored(self, react_app):
        state = MemoryStateStore({TREE_STATE_KEY: {"bogus": True}, SETTINGS_STATE_KEY: {"useAlias": "perhaps"}})
        store = TreeStore(state=state, workspace_root=react_app)
        assert store.get_tree() is None
        assert store.settings.use_alias is False


class TestParse:
    def test_parse_builds_and_persists(self, parsed, state, react_app):
        tree = parsed.get_tree()
        assert tree.root.file_path == str(react_app / "src/index.jsx")
        assert state.load(TREE_STATE_KEY) == tree.to_dict()

    def test_no_entry_file(self, store):
        with pytest.raises(NoEntryFileError):
            store.parse()
        assert store.get_tree() is None

    def test_invalid_settings_leave_tree_untouched(self, parsed):
        tree = parsed.get_tree()
        parsed.update_settings("useAlias", True)
        with pytest.raises(InvalidSettingsError, match="useAlias requires"):
            parsed.parse()
        assert parsed.get_tree() is tree

    def test_settings_change_during_parse_discards_build(self, store, react_app):
        store.set_entry_file(react_app / "src/index.jsx")

        def change_midway(settings):
            store.update_settings("includeNonComponents", False)
            return settings_problems(settings)

        with patch("sapling.tree.store.settings_problems", side_effect=change_midway):
            store.parse()

        assert store.get_tree() is None
        assert store.settings.include_non_components is False

    def test_set_entry_file_does_not_parse(self, store, react_app):
        store.set_entry_file(react_app / "src/App.jsx")
        assert store.get_tree() is None

    def test_listeners_receive_snapshots(self, store, react_app):
        received = []
        store.subscribe(received.append)
        store.set_entry_file(react_app / "src/index.jsx")
        store.parse()

        assert len(received) == 1
        assert isinstance(received[0], Snapshot)
        assert received[0].tree is store.get_tree()

    def test_unsubscribe(self, store, react_app):
        listener = MagicMock()
        unsubscribe = store.subscribe(listener)
        unsubscribe()
        store.update_settings("useAlias", False)
        listener.assert_not_called()

    def test_failing_listener_does_not_break_store(self, store):
        store.subscribe(MagicMock(side_effect=RuntimeError("boom")))
        assert store.update_settings("useAlias", False).use_alias is False


class TestUpdateSettings:
    def test_does_not_reparse(self, parsed, react_app):
        tree = parsed.get_tree()
        parsed.update_settings("includeNonComponents", False)
        assert parsed.get_tree() is tree

    def test_persists(self, store, state):
        store.update_settings("tsConfig", "tsconfig.json")
        assert state.load(SETTINGS_STATE_KEY)["tsConfig"] == "tsconfig.json"

    def test_unknown_key(self, store, state):
        with pytest.raises(InvalidSettingsError):
            store.update_settings("colour", "green")
        assert state.load(SETTINGS_STATE_KEY) is None

    def test_valid_settings(self, store):
        assert store.valid_settings()
        store.update_settings("appRoot", "")
        assert not store.valid_settings()


class TestToggleNode:
    def test_toggle(self, parsed, state):
        node = parsed.get_tree().root.children[0]
        tree = parsed.toggle_node(node.id, True)

        assert tree.find_node(node.id).expanded is True
        assert parsed.get_tree().find_node(node.id).expanded is True
        assert state.load(TREE_STATE_KEY) == tree.to_dict()

    def test_unknown_id_is_a_no_op(self, parsed):
        tree = parsed.get_tree()
        before = tree.model_dump()
        assert parsed.toggle_node("nonexistent", True) is tree
        assert parsed.get_tree().model_dump() == before

    def test_without_tree(self, store):
        assert store.toggle_node("anything", True) is None


class TestUpdateTree:
    def test_no_tree_is_a_no_op(self, store, react_app):
        snapshot = store.update_tree(react_app / "src/App.jsx")
        assert snapshot.tree is None

    def test_rebuilds_changed_file(self, parsed, react_app):
        app = parsed.get_tree().root.children[0]
        parsed.toggle_node(app.id, True)

        (react_app / "src/App.jsx").write_text(
            "import Header from './Header';\nexport default function App() { return <Header />; }\n"
        )
        tree = parsed.update_tree(react_app / "src/App.jsx").tree

        new_app = tree.root.children[0]
        assert new_app.id == app.id
        assert new_app.expanded is True
        assert [Path(c.file_path).name for c in new_app.children] == ["Header.jsx"]

    def test_alias_config_change_refreshes(self, parsed, react_app):
        (react_app / "tsconfig.json").write_text("{}")
        parsed.update_settings("tsConfig", "tsconfig.json")

        with patch.object(TreeBuilder, "refresh", autospec=True, side_effect=TreeBuilder.refresh) as refresh:
            parsed.update_tree(react_app / "tsconfig.json")
        refresh.assert_called_once()

    def test_toggle_during_rebuild_is_kept(self, parsed, react_app):
        app = parsed.get_tree().root.children[0]
        original = TreeBuilder.rebuild_subtree

        def toggle_midway(builder, tree, changed):
            result = original(builder, tree, changed)
            parsed.toggle_node(app.id, True)
            return result

        with patch.object(TreeBuilder, "rebuild_subtree", autospec=True, side_effect=toggle_midway):
            tree = parsed.update_tree(react_app / "src/App.jsx").tree

        assert tree.find_node(app.id).expanded is True

    def test_superseded_build_is_discarded(self, parsed, react_app):
        original = TreeBuilder.rebuild_subtree
        newer = {}

        def parse_midway(builder, tree, changed):
            result = original(builder, tree, changed)
            parsed.set_entry_file(react_app / "src/Header.jsx")
            newer["snapshot"] = parsed.parse()
            return result

        with patch.object(TreeBuilder, "rebuild_subtree", autospec=True, side_effect=parse_midway):
            parsed.update_tree(react_app / "src/App.jsx")

        assert parsed.get_tree() is newer["snapshot"].tree
        assert parsed.get_tree().entry_file_path == str(react_app / "src/Header.jsx")

    def test_settings_change_during_rebuild_discards_it(self, parsed, react_app):
        tree = parsed.get_tree()
        original = TreeBuilder.rebuild_subtree

        def change_midway(builder, current, changed):
            parsed.update_settings("includeNonComponents", False)
            return original(builder, current, changed)

        with patch.object(TreeBuilder, "rebuild_subtree", autospec=True, side_effect=change_midway):
            parsed.update_tree(react_app / "src/App.jsx")

        assert parsed.get_tree() is tree

    def test_persisted_tree_matches_memory_under_contention(self, react_app):
        class SlowStateStore(MemoryStateStore):
            def save(self, key, value):
                time.sleep(0.01)
                super().save(key, value)

        state = SlowStateStore()
        store = TreeStore(state=state, workspace_root=react_app)
        store.set_entry_file(react_app / "src/index.jsx")
        ids = [n.id for n in store.parse().tree.iter_nodes()]

        def worker(expanded):
            for node_id in ids:
                store.toggle_node(node_id, expanded)
                store.update_tree(react_app / "src/Header.jsx")

        threads = [threading.Thread(target=worker, args=(flag,)) for flag in (True, False, True)]
        for t in threads:
            t.start()
        for t in threads:
            t.join()

        assert state.load(TREE_STATE_KEY) == store.get_tree().to_dict()

    def test_concurrent_updates(self, parsed, react_app, state):
        errors = []

        def worker():
            try:
                for _ in range(3):
                    parsed.update_tree(react_app / "src/utils.js")
            except Exception as e:
                errors.append(e)

        threads = [threading.Thread(target=worker) for _ in range(4)]
        for t in threads:
            t.start()
        for t in threads:
            t.join()

        assert errors == []
        assert len(parsed.get_tree().nodes_for_file(str(react_app / "src/utils.js"))) == 2
        assert state.load(TREE_STATE_KEY) == parsed.get_tree().to_dict()


class TestSetTreeAndClear:
    def test_set_tree(self, parsed, react_app, state):
        tree = parsed.get_tree()
        other = TreeStore(state=MemoryStateStore(), workspace_root=react_app)
        other.set_tree(tree)
        assert other.get_tree() is tree
        assert other.entry_file == Path(tree.entry_file_path)

    def test_clear(self, parsed, state, react_app):
        parsed.update_settings("useAlias", True)
        parsed.clear()

        assert parsed.get_tree() is None
        assert parsed.entry_file is None
        assert parsed.settings == Settings(app_root=str(react_app))
        assert state.load(TREE_STATE_KEY) is None
        assert state.load(SETTINGS_STATE_KEY) is None

    def test_sqlite_persistence(self, react_app, tmp_path):
        db = tmp_path / ".sapling" / "state.db"
        first = TreeStore(state=SQLiteStateStore(db), workspace_root=react_app)
        first.set_entry_file(react_app / "src/index.jsx")
        tree = first.parse().tree

        second = TreeStore(state=SQLiteStateStore(db), workspace_root=react_app)
        assert second.get_tree() == tree

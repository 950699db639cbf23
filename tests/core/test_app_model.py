"""Unit tests for AppModel: business rules, persistence and notification."""

from __future__ import annotations

from uuid import uuid4

import pytest

from arcmark.core.importers import ArcImportResult, ImportWorkspace
from arcmark.core.managers import AppModel, default_title
from arcmark.core.models import (
    MAX_PINNED_LINKS,
    FolderNode,
    LinkNode,
    MoveDirection,
    MutationStatus,
    NodeLocation,
    WorkspaceColorId,
    make_link,
)
from arcmark.core.store import LocalStateStore, MemoryStateStore


@pytest.fixture
def changes(model: AppModel) -> list[int]:
    """Records one entry per change notification."""
    events: list[int] = []
    model.on_change = lambda: events.append(1)
    return events


def _root_names(model: AppModel) -> list[str]:
    return [node.display_name for node in model.current_workspace.items]


def _add_links(model: AppModel, *titles: str) -> list:
    return [model.add_link(f"https://{title.lower()}.example", title).id for title in titles]


# ---------------------------------------------------------------------------
# Startup
# ---------------------------------------------------------------------------


def test_fresh_model_has_inbox(model: AppModel, store: MemoryStateStore) -> None:
    assert [w.name for w in model.workspaces] == ["Inbox"]
    assert model.current_workspace.items == []
    assert store.save_count == 1


def test_default_store_comes_from_settings(settings_env) -> None:
    model = AppModel()
    model.add_link("https://a.com", "A")

    assert (settings_env / "data.json").is_file()
    assert _root_names(AppModel()) == ["A"]


def test_selection_restored_from_hint(tmp_path) -> None:
    store = LocalStateStore(tmp_path)
    first = AppModel(store)
    work_id = first.create_workspace("Work").id

    second = AppModel(LocalStateStore(tmp_path))

    assert second.current_workspace.id == work_id


def test_empty_workspace_list_is_healed() -> None:
    store = MemoryStateStore(document='{"schemaVersion": 1, "workspaces": []}')
    model = AppModel(store)

    assert [w.name for w in model.workspaces] == ["Inbox"]
    assert model.state.selected_workspace_id == model.current_workspace.id
    assert '"Inbox"' in store.document


# ---------------------------------------------------------------------------
# End-to-end
# ---------------------------------------------------------------------------


def test_end_to_end_scenario(model: AppModel) -> None:
    work_id = model.add_folder("Work").id
    work = model.node_by_id(work_id)
    assert isinstance(work, FolderNode)
    assert work.folder.is_expanded
    assert work.folder.children == []

    a_id = model.add_link("https://a.com", "A", work_id).id
    work = model.node_by_id(work_id)
    assert [child.link.title for child in work.folder.children] == ["A"]

    assert model.move_node(a_id, None, 0)
    assert _root_names(model) == ["A", "Work"]
    assert model.node_by_id(work_id).folder.children == []

    assert model.pin_link(a_id)
    workspace = model.current_workspace
    assert _root_names(model) == ["Work"]
    assert [link.title for link in workspace.pinned_links] == ["A"]
    assert workspace.pinned_links[0].id == a_id


# ---------------------------------------------------------------------------
# Create / edit
# ---------------------------------------------------------------------------


def test_add_link_default_title(model: AppModel) -> None:
    link_id = model.add_link("https://docs.python.org/3/").id
    assert model.node_by_id(link_id).link.title == "docs.python.org"


def test_default_title() -> None:
    assert default_title("https://example.com/path") == "example.com"
    assert default_title("not a url") == "not a url"
    assert default_title("http://[::1") == "http://[::1"


def test_add_under_missing_parent_is_rejected(model: AppModel, changes: list[int]) -> None:
    result = model.add_link("https://a.com", "A", uuid4())

    assert result.status is MutationStatus.NOT_FOUND
    assert not result
    assert model.current_workspace.items == []
    assert changes == []


def test_add_folder_collapsed(model: AppModel) -> None:
    folder_id = model.add_folder("Archive", is_expanded=False).id
    assert not model.node_by_id(folder_id).folder.is_expanded


def test_rename_node_by_variant(model: AppModel) -> None:
    folder_id = model.add_folder("F").id
    link_id = model.add_link("https://a.com", "A", folder_id).id

    assert model.rename_node(folder_id, "Folder")
    assert model.rename_node(link_id, "Link")
    assert model.node_by_id(folder_id).folder.name == "Folder"
    assert model.node_by_id(link_id).link.title == "Link"
    assert model.rename_node(link_id, "Link").status is MutationStatus.UNCHANGED
    assert model.rename_node(uuid4(), "x").status is MutationStatus.NOT_FOUND


def test_set_folder_expanded(model: AppModel) -> None:
    folder_id = model.add_folder("F").id
    link_id = model.add_link("https://a.com", "A").id

    assert model.set_folder_expanded(folder_id, False)
    assert not model.node_by_id(folder_id).folder.is_expanded
    assert model.set_folder_expanded(folder_id, False).status is MutationStatus.UNCHANGED
    assert model.set_folder_expanded(link_id, True).status is MutationStatus.INVALID_TARGET


def test_favicon_update_is_idempotent(model: AppModel, store: MemoryStateStore, changes: list[int]) -> None:
    link_id = model.add_link("https://a.com", "A").id
    saves = store.save_count

    assert model.update_link_favicon_path(link_id, "/icons/a.com.ico")
    assert model.update_link_favicon_path(link_id, "/icons/a.com.ico").status is MutationStatus.UNCHANGED

    assert store.save_count == saves + 1
    assert len(changes) == 2  # add_link + one favicon update
    assert model.node_by_id(link_id).link.favicon_path == "/icons/a.com.ico"


def test_pinned_favicon_update(model: AppModel) -> None:
    link_id = model.add_link("https://a.com", "A").id
    model.pin_link(link_id)

    assert model.update_pinned_link_favicon_path(link_id, "/icons/a.ico")
    assert model.pinned_link_by_id(link_id).favicon_path == "/icons/a.ico"
    assert model.update_pinned_link_favicon_path(link_id, "/icons/a.ico").status is MutationStatus.UNCHANGED
    assert model.update_pinned_link_favicon_path(uuid4(), "/x").status is MutationStatus.NOT_FOUND


def test_update_link_url_clears_favicon(model: AppModel) -> None:
    link_id = model.add_link("https://a.com", "A").id
    model.update_link_favicon_path(link_id, "/icons/a.ico")

    assert model.update_link_url(link_id, "https://b.com")
    link = model.node_by_id(link_id).link
    assert link.url == "https://b.com"
    assert link.favicon_path is None
    assert model.update_link_url(link_id, "https://b.com").status is MutationStatus.UNCHANGED


def test_title_if_default_fills_in_fetched_title(model: AppModel) -> None:
    link_id = model.add_link("https://a.com/page").id

    assert model.update_link_title_if_default(link_id, "  A Site  ")
    assert model.node_by_id(link_id).link.title == "A Site"
    # No longer the default title, so later fetches leave it alone.
    assert model.update_link_title_if_default(link_id, "Other").status is MutationStatus.UNCHANGED


def test_title_if_default_respects_user_edits(model: AppModel) -> None:
    link_id = model.add_link("https://a.com").id
    model.rename_node(link_id, "Mine")

    assert not model.update_link_title_if_default(link_id, "Fetched")
    assert model.node_by_id(link_id).link.title == "Mine"


def test_title_if_default_ignores_blank_and_equal(model: AppModel) -> None:
    link_id = model.add_link("https://a.com").id

    assert not model.update_link_title_if_default(link_id, "   ")
    assert not model.update_link_title_if_default(link_id, "a.com")
    assert model.update_link_title_if_default(uuid4(), "x").status is MutationStatus.NOT_FOUND


# ---------------------------------------------------------------------------
# Delete / move
# ---------------------------------------------------------------------------


def test_delete_cascades(model: AppModel) -> None:
    folder_id = model.add_folder("F").id
    link_id = model.add_link("https://a.com", "A", folder_id).id

    assert model.delete_node(folder_id)
    assert model.node_by_id(link_id) is None
    assert model.delete_node(folder_id).status is MutationStatus.NOT_FOUND


@pytest.mark.parametrize(
    ("mover", "index", "expected"),
    [
        ("A", 2, ["B", "C", "A"]),
        ("C", 0, ["C", "A", "B"]),
        ("A", 1, ["B", "A", "C"]),
        ("B", -3, ["B", "A", "C"]),
        ("A", 99, ["B", "C", "A"]),
    ],
)
def test_move_within_root(model: AppModel, mover: str, index: int, expected: list[str]) -> None:
    ids = dict(zip("ABC", _add_links(model, "A", "B", "C"), strict=True))

    assert model.move_node(ids[mover], None, index)
    assert _root_names(model) == expected


def test_move_to_same_position_is_unchanged(model: AppModel, changes: list[int]) -> None:
    a, _, c = _add_links(model, "A", "B", "C")
    changes.clear()

    assert model.move_node(a, None, 0).status is MutationStatus.UNCHANGED
    assert model.move_node(c, None, 10).status is MutationStatus.UNCHANGED
    assert changes == []


def test_move_into_folder_and_out(model: AppModel) -> None:
    folder_id = model.add_folder("F").id
    a, b = _add_links(model, "A", "B")

    assert model.move_node(b, folder_id, 0)
    assert model.move_node(a, folder_id, 0)
    assert [c.display_name for c in model.node_by_id(folder_id).folder.children] == ["A", "B"]
    assert model.location(b) == NodeLocation(parent_id=folder_id, index=1)

    assert model.move_node(b, None, 0)
    assert _root_names(model) == ["B", "F"]


def test_move_cycle_guard(model: AppModel, changes: list[int]) -> None:
    outer = model.add_folder("outer").id
    inner = model.add_folder("inner", outer).id
    model.add_link("https://x.com", "X", inner)
    before = model.current_workspace.items
    changes.clear()

    assert model.move_node(outer, inner, 0).status is MutationStatus.WOULD_CREATE_CYCLE
    assert model.move_node(outer, outer, 0).status is MutationStatus.WOULD_CREATE_CYCLE
    assert model.current_workspace.items == before
    assert changes == []


def test_move_to_missing_folder_keeps_node(model: AppModel) -> None:
    (a,) = _add_links(model, "A")

    assert model.move_node(a, uuid4(), 0).status is MutationStatus.NOT_FOUND
    assert model.move_node(uuid4(), None, 0).status is MutationStatus.NOT_FOUND
    assert _root_names(model) == ["A"]


def test_move_node_to_workspace(model: AppModel) -> None:
    inbox_id = model.current_workspace.id
    folder_id = model.add_folder("F").id
    link_id = model.add_link("https://a.com", "A", folder_id).id
    work_id = model.create_workspace("Work").id
    model.add_link("https://w.com", "W")
    model.select_workspace(inbox_id)

    assert model.move_node_to_workspace(link_id, work_id)

    assert model.node_by_id(folder_id).folder.children == []
    model.select_workspace(work_id)
    assert _root_names(model) == ["W", "A"]


def test_move_node_to_workspace_rejections(model: AppModel) -> None:
    (a,) = _add_links(model, "A")
    current = model.current_workspace.id

    assert model.move_node_to_workspace(a, current).status is MutationStatus.INVALID_TARGET
    assert model.move_node_to_workspace(a, uuid4()).status is MutationStatus.NOT_FOUND
    assert _root_names(model) == ["A"]


def test_move_nodes_to_workspace_keeps_order(model: AppModel) -> None:
    inbox_id = model.current_workspace.id
    a, b, c = _add_links(model, "A", "B", "C")
    work_id = model.create_workspace("Work").id
    model.select_workspace(inbox_id)

    assert model.move_nodes_to_workspace([c, a], work_id)

    assert _root_names(model) == ["B"]
    model.select_workspace(work_id)
    assert _root_names(model) == ["C", "A"]


def test_group_nodes(model: AppModel) -> None:
    a, b, c, d = _add_links(model, "A", "B", "C", "D")

    result = model.group_nodes([c, a], "G")

    assert result
    assert _root_names(model) == ["B", "G", "D"]
    group = model.node_by_id(result.id)
    assert group.folder.is_expanded
    assert [child.display_name for child in group.folder.children] == ["C", "A"]


def test_group_nodes_nested_anchor(model: AppModel) -> None:
    folder_id = model.add_folder("F").id
    x = model.add_link("https://x.com", "X", folder_id).id
    y = model.add_link("https://y.com", "Y", folder_id).id
    (a,) = _add_links(model, "A")

    result = model.group_nodes([y, a], "G")

    assert model.location(result.id) == NodeLocation(parent_id=folder_id, index=1)
    assert [c.display_name for c in model.node_by_id(folder_id).folder.children] == ["X", "G"]
    assert model.location(x) == NodeLocation(parent_id=folder_id, index=0)


def test_group_nodes_missing(model: AppModel) -> None:
    assert model.group_nodes([uuid4()], "G").status is MutationStatus.NOT_FOUND
    assert model.group_nodes([], "G").status is MutationStatus.NOT_FOUND


# ---------------------------------------------------------------------------
# Pinning
# ---------------------------------------------------------------------------


def test_pin_cap(model: AppModel) -> None:
    ids = _add_links(model, *(f"L{i}" for i in range(MAX_PINNED_LINKS + 1)))
    for link_id in ids[:MAX_PINNED_LINKS]:
        assert model.pin_link(link_id)
    assert not model.can_pin_more

    result = model.pin_link(ids[-1])

    assert result.status is MutationStatus.LIMIT_EXCEEDED
    assert len(model.current_workspace.pinned_links) == MAX_PINNED_LINKS
    assert model.node_by_id(ids[-1]) is not None


def test_pin_from_nested_folder(model: AppModel) -> None:
    folder_id = model.add_folder("F").id
    link_id = model.add_link("https://a.com", "A", folder_id).id

    assert model.pin_link(link_id)
    assert model.node_by_id(folder_id).folder.children == []
    assert model.pin_link(link_id).status is MutationStatus.UNCHANGED


def test_pin_rejects_folders_and_unknown(model: AppModel) -> None:
    folder_id = model.add_folder("F").id
    assert model.pin_link(folder_id).status is MutationStatus.INVALID_TARGET
    assert model.pin_link(uuid4()).status is MutationStatus.NOT_FOUND


def test_unpin_appends_to_root(model: AppModel) -> None:
    a, b = _add_links(model, "A", "B")
    model.pin_link(a)

    assert model.unpin_link(a)
    assert _root_names(model) == ["B", "A"]
    assert model.current_workspace.pinned_links == []
    assert model.unpin_link(a).status is MutationStatus.NOT_FOUND


# ---------------------------------------------------------------------------
# Workspaces
# ---------------------------------------------------------------------------


def test_last_workspace_guard(model: AppModel, changes: list[int]) -> None:
    only_id = model.current_workspace.id

    assert model.delete_workspace(only_id).status is MutationStatus.LAST_ITEM_PROTECTED
    assert len(model.workspaces) == 1
    assert changes == []


def test_workspace_pass_throughs_persist(model: AppModel, store: MemoryStateStore, changes: list[int]) -> None:
    inbox_id = model.current_workspace.id
    work_id = model.create_workspace("Work", WorkspaceColorId.OCEAN).id
    assert model.current_workspace.id == work_id

    assert model.rename_workspace(work_id, "Office")
    assert model.update_workspace_color(work_id, WorkspaceColorId.MOSS)
    assert model.move_workspace(work_id, MoveDirection.LEFT)
    assert [w.name for w in model.workspaces] == ["Office", "Inbox"]
    assert model.reorder_workspace(work_id, 1)
    assert model.delete_workspace(work_id)

    assert model.current_workspace.id == inbox_id
    assert len(changes) == 6
    assert '"Office"' not in store.document


def test_select_settings(model: AppModel) -> None:
    assert model.select_settings()
    assert model.is_settings_selected
    assert model.select_workspace(model.workspaces[0].id)
    assert not model.is_settings_selected


def test_import_workspaces_saves_once(model: AppModel, store: MemoryStateStore) -> None:
    inbox_id = model.current_workspace.id
    saves = store.save_count
    result = ArcImportResult(
        workspaces=[
            ImportWorkspace(name="Arc", color_id=WorkspaceColorId.RUBY, nodes=[make_link("https://a.com", "A")]),
            ImportWorkspace(name="Arc 2", color_id=WorkspaceColorId.CORAL),
        ],
        links_imported=1,
    )

    created = model.import_workspaces(result)

    assert len(created) == 2
    assert [w.name for w in model.workspaces] == ["Inbox", "Arc", "Arc 2"]
    assert model.current_workspace.id == inbox_id
    assert store.save_count == saves + 1
    assert model.import_workspaces(ArcImportResult()) == []
    assert store.save_count == saves + 1


# ---------------------------------------------------------------------------
# Queries
# ---------------------------------------------------------------------------


def test_snapshots_are_detached(model: AppModel) -> None:
    link_id = model.add_link("https://a.com", "A").id

    workspace = model.current_workspace
    workspace.items.clear()
    node = model.node_by_id(link_id)
    node.link.title = "hacked"

    assert _root_names(model) == ["A"]


def test_filtered_items(model: AppModel) -> None:
    folder_id = model.add_folder("F").id
    model.add_link("https://a.com", "Alpha", folder_id)
    model.add_link("https://b.com", "Beta")

    result = model.filtered_items("alp")
    assert [node.display_name for node in result] == ["F"]
    assert len(model.filtered_items("")) == 2


def test_link_urls(model: AppModel) -> None:
    folder_id = model.add_folder("F").id
    a = model.add_link("https://a.com", "A", folder_id).id
    b = model.add_link("https://b.com", "B").id

    assert model.link_urls([b, folder_id, a, uuid4()]) == ["https://b.com", "https://a.com"]


def test_node_by_id_is_link_node(model: AppModel) -> None:
    link_id = model.add_link("https://a.com", "A").id
    assert isinstance(model.node_by_id(link_id), LinkNode)

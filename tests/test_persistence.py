from __future__ import annotations

import json

import pytest

from layout_maker.exceptions import SceneNotFoundError, ValidationError
from layout_maker.model.elements import Service, Table
from layout_maker.model.scene import new_scene, scene_from_dict
from layout_maker.model.walls import make_door, make_wall
from layout_maker.persistence.scenes import SceneRepository, Workspace
from layout_maker.settings import Settings
from layout_maker.storage.local import LocalStorage
from layout_maker.storage.memory import MemoryStorage


@pytest.fixture()
def storage() -> MemoryStorage:
    return MemoryStorage()


@pytest.fixture()
def repository(storage) -> SceneRepository:
    return SceneRepository(storage, key_prefix="test")


def _populated_scene():
    scene = new_scene("Wedding")
    scene.store.add_element(Table(id="t1", x=1.0, y=1.0, width=1.5, height=1.5, capacity=8, rotation=45.0))
    scene.store.generate_chairs("t1")
    scene.store.add_element(Service(id="bar", x=5.0, y=0.5, width=2.0, height=0.6))
    wall = make_wall((0.0, 0.0), (6.0, 0.0), wall_id="w1")
    scene.walls = [wall]
    scene.doors = [make_door(wall, 0.5, door_id="d1")]
    scene.viewport = {"pan_x": 12.0, "pan_y": -4.0, "zoom": 1.5}
    return scene


def test_scene_snapshot_decodes_to_equal_scene():
    scene = _populated_scene()
    payload = json.loads(json.dumps(scene.to_dict()))
    restored = scene_from_dict(payload)
    assert restored.to_dict() == scene.to_dict()
    assert restored.element_order == scene.element_order


def test_v1_snapshots_are_migrated():
    payload = {
        "version": 1,
        "id": "p1",
        "name": "Old",
        "elements": [
            {"kind": "service", "id": "a", "x": 0, "y": 0, "width": 1, "height": 1},
            {"kind": "decoration", "id": "b", "x": 2, "y": 0, "width": 1, "height": 1},
        ],
    }
    scene = scene_from_dict(payload)
    assert scene.element_order == ["a", "b"]


def test_missing_store_yields_one_default_scene(repository):
    scenes = repository.load_scenes()
    assert len(scenes) == 1
    assert scenes[0].name == "Layout 1"
    assert len(scenes[0].store) == 0


@pytest.mark.parametrize(
    "raw",
    [
        b"not json",
        b"\xff\xfe",
        b"{}",
        b"[]",
        b'[{"id": "p1", "name": "x", "elements": {"a": {"kind": "spaceship"}}}]',
        b'[{"id": "p1", "name": "x"}, {"id": "p1", "name": "y"}]',
        b'[{"id": "p1", "name": "x", "version": 99}]',
    ],
)
def test_unusable_store_falls_back_to_default(storage, repository, raw):
    storage.put_bytes(repository.scenes_key, raw)
    scenes = repository.load_scenes()
    assert len(scenes) == 1
    assert len(scenes[0].store) == 0


def test_scenes_round_trip_through_storage(repository):
    scene = _populated_scene()
    repository.save_scenes([scene, new_scene("Second")])
    loaded = repository.load_scenes()
    assert [s.name for s in loaded] == ["Wedding", "Second"]
    assert loaded[0].to_dict() == scene.to_dict()


def test_active_id_and_presets_fail_soft(storage, repository):
    storage.put_bytes(repository.active_key, b"{broken")
    storage.put_bytes(repository.presets_key, b'{"not": "a list"}')
    assert repository.load_active_scene_id() is None
    assert repository.load_presets().names() == []


def test_local_storage_writes_one_file_per_key(tmp_path):
    storage = LocalStorage(tmp_path)
    repository = SceneRepository(storage, key_prefix="layout-maker")
    repository.save_scenes([new_scene("On disk")])
    assert (tmp_path / "layout-maker_scenes.json").exists()
    assert repository.load_scenes()[0].name == "On disk"
    storage.delete(repository.scenes_key)
    assert storage.get_bytes(repository.scenes_key) is None


def test_workspace_switching_isolates_scenes(repository):
    workspace = Workspace(repository, Settings())
    first_id = workspace.active_id
    workspace.engine.add_item("service", "bar", center=(2.0, 2.0))
    second = workspace.new_project("B")
    assert len(second.store) == 0

    workspace.engine.add_item("decoration", "arch", center=(5.0, 5.0))
    workspace.switch_project(first_id)
    kinds = sorted(e.kind.value for e in workspace.engine.store)
    assert kinds == ["service"]

    workspace.switch_project(second.id)
    assert sorted(e.kind.value for e in workspace.engine.store) == ["decoration"]


def test_stored_scene_is_not_the_live_scene(repository):
    workspace = Workspace(repository, Settings())
    workspace.engine.add_item("service", "bar", center=(2.0, 2.0))
    workspace.save()
    workspace.engine.add_item("service", "buffet", center=(4.0, 2.0))
    assert len(workspace.scenes[workspace.active_id].store) == 1


def test_workspace_persists_and_reopens(storage, repository):
    workspace = Workspace(repository, Settings())
    workspace.engine.add_space(10.0, 8.0)
    workspace.new_project("Second")
    workspace.engine.zoom_to(2.0)
    workspace.save()

    reopened = Workspace(SceneRepository(storage, key_prefix="test"), Settings())
    assert reopened.active_id == workspace.active_id
    assert [p["name"] for p in reopened.list_projects()] == ["Layout 1", "Second"]
    assert reopened.engine.viewport.zoom == pytest.approx(2.0)


def test_dangling_active_id_falls_back_to_first(storage, repository):
    repository.save_scenes([new_scene("Only")])
    repository.save_active_scene_id("project-gone")
    workspace = Workspace(repository, Settings())
    assert workspace.engine.scene.name == "Only"


def test_rename_and_delete(repository):
    workspace = Workspace(repository, Settings())
    first_id = workspace.active_id
    workspace.new_project("B")
    workspace.rename_project(first_id, "  Renamed  ")
    assert workspace.scenes[first_id].name == "Renamed"
    with pytest.raises(ValidationError):
        workspace.rename_project(first_id, "   ")
    with pytest.raises(SceneNotFoundError):
        workspace.switch_project("nope")

    active = workspace.active_id
    workspace.delete_project(active)
    assert workspace.active_id == first_id
    assert workspace.engine.scene.name == "Renamed"


def test_last_project_cannot_be_deleted(repository):
    workspace = Workspace(repository, Settings())
    with pytest.raises(ValidationError):
        workspace.delete_project(workspace.active_id)
    assert len(workspace.scenes) == 1


def test_uncommitted_walls_do_not_follow_a_project_switch(repository):
    workspace = Workspace(repository)
    first_id = workspace.active_id
    engine = workspace.engine
    engine.set_tool("wall")
    engine.pointer_down((0.0, 0.0))
    engine.pointer_up((300.0, 0.0))
    assert len(engine.construction.buffer.walls) == 1

    workspace.new_project("B")
    assert not engine.construction.buffer
    assert engine.commit_walls()
    assert engine.scene.walls == []

    workspace.switch_project(first_id)
    assert engine.scene.walls == []

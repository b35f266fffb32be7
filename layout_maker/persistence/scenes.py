"""
Scene persistence and project switching.

``SceneRepository`` is the durable boundary: every write replaces the whole
record under its key and every read that fails yields a usable default
instead of an error. ``Workspace`` owns the stored scene collection plus the
live engine; the live scene is always a private deep copy, handed back to
the collection (again as a copy) before another scene is activated.
"""

from __future__ import annotations

import json
from typing import Any

from loguru import logger

from layout_maker.editor.construction import PresetLibrary, WallPreset
from layout_maker.editor.engine import LayoutEngine
from layout_maker.exceptions import (
    MalformedSceneError,
    SceneNotFoundError,
    StorageError,
    ValidationError,
)
from layout_maker.model.scene import Scene, new_scene, scene_from_dict
from layout_maker.model.store import OrphanPolicy
from layout_maker.settings import Settings
from layout_maker.storage import KeyValueStore

_DECODE_ERRORS = (
    MalformedSceneError,
    StorageError,
    UnicodeDecodeError,
    json.JSONDecodeError,
    AttributeError,
    KeyError,
    TypeError,
    ValueError,
)


class SceneRepository:
    def __init__(
        self,
        storage: KeyValueStore,
        key_prefix: str = "layout-maker",
        orphan_policy: OrphanPolicy = "keep",
    ) -> None:
        self.storage = storage
        self.key_prefix = key_prefix
        self.orphan_policy = orphan_policy

    @property
    def scenes_key(self) -> str:
        return f"{self.key_prefix}:scenes"

    @property
    def active_key(self) -> str:
        return f"{self.key_prefix}:active-scene"

    @property
    def presets_key(self) -> str:
        return f"{self.key_prefix}:presets"

    def _read_json(self, key: str) -> Any:
        raw = self.storage.get_bytes(key)
        if raw is None:
            return None
        return json.loads(raw.decode("utf-8"))

    def _write_json(self, key: str, payload: Any) -> None:
        self.storage.put_bytes(key, json.dumps(payload, ensure_ascii=False).encode("utf-8"))

    # -- scenes ---------------------------------------------------------

    def _default(self) -> list[Scene]:
        return [new_scene(orphan_policy=self.orphan_policy)]

    def load_scenes(self) -> list[Scene]:
        """Stored scenes in order; one fresh default scene when nothing usable is stored."""
        try:
            payload = self._read_json(self.scenes_key)
            if payload is None:
                return self._default()
            if not isinstance(payload, list) or not payload:
                raise MalformedSceneError("scene collection must be a non-empty list")
            scenes = [scene_from_dict(item, self.orphan_policy) for item in payload]
            ids = [scene.id for scene in scenes]
            if len(set(ids)) != len(ids):
                raise MalformedSceneError("duplicate scene ids")
        except _DECODE_ERRORS as exc:
            logger.warning("Stored scenes unusable, starting with a default scene: {error}", error=str(exc))
            return self._default()
        logger.debug("Loaded {count} scenes", count=len(scenes))
        return scenes

    def save_scenes(self, scenes: list[Scene]) -> None:
        self._write_json(self.scenes_key, [scene.to_dict() for scene in scenes])

    def load_active_scene_id(self) -> str | None:
        try:
            payload = self._read_json(self.active_key)
        except _DECODE_ERRORS as exc:
            logger.warning("Stored active scene id unusable: {error}", error=str(exc))
            return None
        return payload if isinstance(payload, str) and payload else None

    def save_active_scene_id(self, scene_id: str) -> None:
        self._write_json(self.active_key, scene_id)

    # -- presets --------------------------------------------------------

    def load_presets(self) -> PresetLibrary:
        try:
            payload = self._read_json(self.presets_key) or []
            if not isinstance(payload, list):
                raise MalformedSceneError("preset collection must be a list")
            return PresetLibrary(WallPreset.from_dict(item) for item in payload)
        except _DECODE_ERRORS as exc:
            logger.warning("Stored wall presets unusable, starting empty: {error}", error=str(exc))
            return PresetLibrary()

    def save_presets(self, presets: PresetLibrary) -> None:
        self._write_json(self.presets_key, presets.to_list())


class Workspace:
    """All projects of one user plus the engine editing the active one."""

    def __init__(self, repository: SceneRepository, settings: Settings | None = None) -> None:
        self.repository = repository
        self.settings = settings or Settings()
        stored = repository.load_scenes()
        self.scenes: dict[str, Scene] = {scene.id: scene for scene in stored}
        active_id = repository.load_active_scene_id()
        if active_id not in self.scenes:
            active_id = stored[0].id
        self.active_id: str = active_id
        self.engine = LayoutEngine(
            scene=self.scenes[active_id].clone(),
            settings=self.settings,
            presets=repository.load_presets(),
        )
        logger.info("Workspace opened with {count} projects, active {id}", count=len(self.scenes), id=active_id)

    # -- reads ----------------------------------------------------------

    def require_scene(self, scene_id: str) -> Scene:
        scene = self.scenes.get(scene_id)
        if scene is None:
            raise SceneNotFoundError(f"project {scene_id} not found", {"id": scene_id})
        return scene

    def list_projects(self) -> list[dict[str, Any]]:
        self._stash_active()
        return [
            {
                "id": scene.id,
                "name": scene.name,
                "active": scene.id == self.active_id,
                "element_count": len(scene.store),
                "wall_count": len(scene.walls),
                "updated_at": scene.updated_at,
            }
            for scene in self.scenes.values()
        ]

    # -- ownership transfer ---------------------------------------------

    def _stash_active(self) -> None:
        """Copy the live scene back into the stored collection."""
        self.engine.sync_viewport()
        self.scenes[self.active_id] = self.engine.scene.clone()

    def _activate(self, scene_id: str) -> None:
        self.active_id = scene_id
        self.engine.load_scene(self.scenes[scene_id].clone())

    def switch_project(self, scene_id: str) -> Scene:
        """Make another project the live one.

        Raises:
            SceneNotFoundError: unknown project id.
        """
        self.require_scene(scene_id)
        if scene_id == self.active_id:
            return self.engine.scene
        self._stash_active()
        self._activate(scene_id)
        logger.info("Switched to project {id}", id=scene_id)
        return self.engine.scene

    def new_project(self, name: str | None = None) -> Scene:
        name = name if name and name.strip() else f"Layout {len(self.scenes) + 1}"
        scene = new_scene(name, orphan_policy=self.settings.seating.orphan_policy)
        self._stash_active()
        self.scenes[scene.id] = scene
        self._activate(scene.id)
        logger.info("Created project {id} ({name})", id=scene.id, name=scene.name)
        return self.engine.scene

    def rename_project(self, scene_id: str, name: str) -> Scene:
        scene = self.require_scene(scene_id)
        name = (name or "").strip()
        if not name:
            raise ValidationError("project name must not be empty", {"id": scene_id})
        scene.name = name[:200]
        scene.touch()
        if scene_id == self.active_id:
            self.engine.scene.name = scene.name
            self.engine.scene.touch()
            return self.engine.scene
        return scene

    def delete_project(self, scene_id: str) -> None:
        """Remove a project; the last one can never be deleted.

        Raises:
            SceneNotFoundError: unknown project id.
            ValidationError: ``scene_id`` is the only project left.
        """
        self.require_scene(scene_id)
        if len(self.scenes) == 1:
            raise ValidationError("cannot delete the last project", {"id": scene_id})
        order = list(self.scenes)
        index = order.index(scene_id)
        del self.scenes[scene_id]
        if scene_id == self.active_id:
            remaining = list(self.scenes)
            self._activate(remaining[min(index, len(remaining) - 1)])
        logger.info("Deleted project {id}", id=scene_id)

    # -- durability -----------------------------------------------------

    def save(self) -> None:
        """Write the full workspace (scenes, active id, presets)."""
        self._stash_active()
        self.repository.save_scenes(list(self.scenes.values()))
        self.repository.save_active_scene_id(self.active_id)
        self.repository.save_presets(self.engine.presets)


__all__ = ["SceneRepository", "Workspace"]

"""Scene (project) documents and their snapshot codec."""

from __future__ import annotations

import copy
from dataclasses import dataclass, field
from typing import Any

from layout_maker.exceptions import MalformedSceneError, ValidationError
from layout_maker.model.elements import element_from_dict, new_id, utc_now
from layout_maker.model.store import ElementStore, OrphanPolicy
from layout_maker.model.walls import Door, Wall, door_from_dict, wall_from_dict

SCHEMA_VERSION = 2
DEFAULT_SCENE_NAME = "Layout 1"


@dataclass
class Scene:
    id: str
    name: str
    store: ElementStore = field(default_factory=ElementStore)
    walls: list[Wall] = field(default_factory=list)
    doors: list[Door] = field(default_factory=list)
    viewport: dict[str, float] = field(default_factory=dict)
    created_at: str = field(default_factory=utc_now)
    updated_at: str = field(default_factory=utc_now)

    @property
    def elements(self):
        return self.store.elements

    @property
    def element_order(self) -> list[str]:
        return self.store.element_order

    def walls_by_id(self) -> dict[str, Wall]:
        return {wall.id: wall for wall in self.walls}

    def touch(self) -> None:
        self.updated_at = utc_now()

    def to_dict(self) -> dict[str, Any]:
        return {
            "version": SCHEMA_VERSION,
            "id": self.id,
            "name": self.name,
            "elements": {eid: self.store.elements[eid].to_dict() for eid in self.store.element_order},
            "element_order": list(self.store.element_order),
            "walls": [wall.to_dict() for wall in self.walls],
            "doors": [door.to_dict() for door in self.doors],
            "viewport": dict(self.viewport),
            "created_at": self.created_at,
            "updated_at": self.updated_at,
        }

    def clone(self) -> "Scene":
        """Deep copy sharing no mutable state with ``self``."""
        return Scene(
            id=self.id,
            name=self.name,
            store=self.store.clone(),
            walls=copy.deepcopy(self.walls),
            doors=copy.deepcopy(self.doors),
            viewport=dict(self.viewport),
            created_at=self.created_at,
            updated_at=self.updated_at,
        )


def new_scene(name: str = DEFAULT_SCENE_NAME, orphan_policy: OrphanPolicy = "keep") -> Scene:
    name = name.strip()[:200] if name and name.strip() else DEFAULT_SCENE_NAME
    return Scene(id=new_id("project"), name=name, store=ElementStore(orphan_policy=orphan_policy))


def _migrate(payload: dict[str, Any]) -> dict[str, Any]:
    version = payload.get("version", 1)
    if not isinstance(version, int) or version > SCHEMA_VERSION:
        raise MalformedSceneError(f"unsupported scene version: {version!r}")
    if version == 1:
        # v1 stored elements as a list in paint order
        items = payload.get("elements") or []
        if not isinstance(items, list):
            raise MalformedSceneError("v1 elements must be a list")
        payload = dict(payload)
        payload["elements"] = {item.get("id"): item for item in items if isinstance(item, dict)}
        payload["element_order"] = [item.get("id") for item in items if isinstance(item, dict)]
        payload["version"] = SCHEMA_VERSION
    return payload


def scene_from_dict(payload: Any, orphan_policy: OrphanPolicy = "keep") -> Scene:
    """Decode a snapshot produced by ``Scene.to_dict`` (or its v1 predecessor).

    Raises:
        MalformedSceneError: anything that is not a well-formed scene.
    """
    if not isinstance(payload, dict):
        raise MalformedSceneError("scene payload must be a mapping")
    payload = _migrate(payload)

    scene_id = payload.get("id")
    name = payload.get("name")
    if not isinstance(scene_id, str) or not scene_id:
        raise MalformedSceneError("scene id must be a non-empty string")
    if not isinstance(name, str):
        raise MalformedSceneError("scene name must be a string", {"id": scene_id})

    raw_elements = payload.get("elements") or {}
    raw_order = payload.get("element_order") or []
    if not isinstance(raw_elements, dict) or not isinstance(raw_order, list):
        raise MalformedSceneError("scene elements must be a mapping with an order list", {"id": scene_id})

    # stored order first, then anything the order list forgot
    order = list(dict.fromkeys(eid for eid in raw_order if eid in raw_elements))
    listed = set(order)
    order.extend(eid for eid in raw_elements if eid not in listed)
    store = ElementStore(orphan_policy=orphan_policy)
    for eid in order:
        element = element_from_dict(raw_elements[eid])
        if element.id != eid:
            raise MalformedSceneError("element key does not match its id", {"id": str(eid)})
        try:
            store.add_element(element)
        except ValidationError as exc:
            raise MalformedSceneError(exc.message, exc.details) from exc

    raw_walls = payload.get("walls") or []
    raw_doors = payload.get("doors") or []
    if not isinstance(raw_walls, list) or not isinstance(raw_doors, list):
        raise MalformedSceneError("walls and doors must be lists", {"id": scene_id})

    viewport = payload.get("viewport") or {}
    if not isinstance(viewport, dict):
        raise MalformedSceneError("viewport must be a mapping", {"id": scene_id})

    return Scene(
        id=scene_id,
        name=name,
        store=store,
        walls=[wall_from_dict(item) for item in raw_walls],
        doors=[door_from_dict(item) for item in raw_doors],
        viewport={key: float(value) for key, value in viewport.items() if isinstance(value, (int, float))},
        created_at=str(payload.get("created_at") or utc_now()),
        updated_at=str(payload.get("updated_at") or utc_now()),
    )


__all__ = ["SCHEMA_VERSION", "DEFAULT_SCENE_NAME", "Scene", "new_scene", "scene_from_dict"]

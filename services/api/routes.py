from __future__ import annotations

from typing import Literal

from fastapi import APIRouter, Depends, Request
from loguru import logger

from layout_maker.editor.state import Modifiers
from layout_maker.exceptions import ValidationError
from layout_maker.model.elements import new_id
from layout_maker.model.walls import Door, Wall, make_wall
from layout_maker.persistence.scenes import Workspace
from services.api.schemas import (
    ItemRequest,
    PanRequest,
    PointerEvent,
    ProjectCreate,
    ProjectOut,
    ProjectRename,
    ResizeElementRequest,
    ResizeViewportRequest,
    RotateRequest,
    SceneResponse,
    SpaceRequest,
    TableRequest,
    ToolRequest,
    WallBatchRequest,
    ZoomRequest,
)


router = APIRouter(prefix="/v1")


def get_workspace(request: Request) -> Workspace:
    return request.app.state.workspace


def _respond(workspace: Workspace, *, save: bool = True) -> SceneResponse:
    """Surface rejected input, persist, and return the fresh snapshot.

    Tool-state misses (a click that hits nothing the tool can act on) are not
    errors for the host; the unchanged scene is returned.
    """
    engine = workspace.engine
    error, engine.last_error = engine.last_error, None
    if isinstance(error, ValidationError):
        raise error
    if save:
        workspace.save()
    return SceneResponse(snapshot=engine.snapshot().to_dict())


@router.get("/scene", response_model=SceneResponse, tags=["scene"])
async def get_scene(workspace: Workspace = Depends(get_workspace)) -> SceneResponse:
    return SceneResponse(snapshot=workspace.engine.snapshot().to_dict())


@router.post("/tool", response_model=SceneResponse, tags=["tools"])
async def set_tool(payload: ToolRequest, workspace: Workspace = Depends(get_workspace)) -> SceneResponse:
    workspace.engine.set_tool(payload.tool)
    return _respond(workspace, save=False)


@router.post("/pointer/{phase}", response_model=SceneResponse, tags=["tools"])
async def pointer(
    phase: Literal["down", "move", "up"],
    payload: PointerEvent,
    workspace: Workspace = Depends(get_workspace),
) -> SceneResponse:
    engine = workspace.engine
    modifiers = Modifiers(**payload.modifiers.model_dump())
    point = (payload.x, payload.y)
    if phase == "down":
        engine.pointer_down(point, modifiers)
    elif phase == "move":
        engine.pointer_move(point, modifiers)
    else:
        engine.pointer_up(point, modifiers)
    # moves are frequent; the gesture is persisted when it ends
    return _respond(workspace, save=phase != "move")


@router.post("/drag/cancel", response_model=SceneResponse, tags=["tools"])
async def cancel_drag(workspace: Workspace = Depends(get_workspace)) -> SceneResponse:
    workspace.engine.cancel_drag()
    return _respond(workspace)


@router.post("/viewport/zoom", response_model=SceneResponse, tags=["viewport"])
async def zoom(payload: ZoomRequest, workspace: Workspace = Depends(get_workspace)) -> SceneResponse:
    engine = workspace.engine
    pivot = payload.pivot.as_tuple() if payload.pivot else None
    if payload.action == "in":
        engine.zoom_in(pivot)
    elif payload.action == "out":
        engine.zoom_out(pivot)
    elif payload.action == "by" and payload.delta is not None:
        engine.zoom_by(payload.delta, pivot)
    elif payload.action == "to" and payload.level is not None:
        engine.zoom_to(payload.level, pivot)
    return _respond(workspace)


@router.post("/viewport/pan", response_model=SceneResponse, tags=["viewport"])
async def pan(payload: PanRequest, workspace: Workspace = Depends(get_workspace)) -> SceneResponse:
    workspace.engine.pan_by(payload.dx, payload.dy)
    return _respond(workspace)


@router.post("/viewport/resize", response_model=SceneResponse, tags=["viewport"])
async def resize_viewport(payload: ResizeViewportRequest, workspace: Workspace = Depends(get_workspace)) -> SceneResponse:
    workspace.engine.resize(payload.width, payload.height)
    return _respond(workspace, save=False)


@router.post("/viewport/reset", response_model=SceneResponse, tags=["viewport"])
async def reset_viewport(workspace: Workspace = Depends(get_workspace)) -> SceneResponse:
    workspace.engine.reset_view()
    return _respond(workspace)


@router.post("/elements/space", response_model=SceneResponse, tags=["elements"])
async def add_space(payload: SpaceRequest, workspace: Workspace = Depends(get_workspace)) -> SceneResponse:
    workspace.engine.add_space(payload.width, payload.height)
    return _respond(workspace)


@router.post("/elements/table", response_model=SceneResponse, tags=["elements"])
async def add_table(payload: TableRequest, workspace: Workspace = Depends(get_workspace)) -> SceneResponse:
    workspace.engine.add_table(
        payload.table_type,
        payload.size,
        payload.seat_count,
        target_space_id=payload.target_space_id,
        center=payload.center.as_tuple() if payload.center else None,
    )
    return _respond(workspace)


@router.post("/elements/item", response_model=SceneResponse, tags=["elements"])
async def add_item(payload: ItemRequest, workspace: Workspace = Depends(get_workspace)) -> SceneResponse:
    workspace.engine.add_item(
        payload.kind,
        payload.subtype,
        center=payload.center.as_tuple() if payload.center else None,
        width=payload.width,
        height=payload.height,
    )
    return _respond(workspace)


@router.post("/elements/{element_id}/rotate", response_model=SceneResponse, tags=["elements"])
async def rotate_element(
    element_id: str,
    payload: RotateRequest,
    workspace: Workspace = Depends(get_workspace),
) -> SceneResponse:
    workspace.engine.rotate_element(element_id, payload.rotation)
    return _respond(workspace)


@router.post("/elements/{element_id}/resize", response_model=SceneResponse, tags=["elements"])
async def resize_element(
    element_id: str,
    payload: ResizeElementRequest,
    workspace: Workspace = Depends(get_workspace),
) -> SceneResponse:
    workspace.engine.resize_element(element_id, payload.width, payload.height)
    return _respond(workspace)


@router.delete("/elements/{element_id}", response_model=SceneResponse, tags=["elements"])
async def delete_element(element_id: str, workspace: Workspace = Depends(get_workspace)) -> SceneResponse:
    removed = workspace.engine.delete_element(element_id)
    logger.debug("DELETE {id} removed {count} elements", id=element_id, count=len(removed))
    return _respond(workspace)


@router.post("/walls/batch", response_model=SceneResponse, tags=["walls"])
async def add_walls_batch(payload: WallBatchRequest, workspace: Workspace = Depends(get_workspace)) -> SceneResponse:
    wall_settings = workspace.settings.walls
    walls: list[Wall] = [
        make_wall(
            (item.x1, item.y1),
            (item.x2, item.y2),
            item.thickness or wall_settings.default_thickness,
            wall_id=item.id,
        )
        for item in payload.walls
    ]
    doors = [
        Door(
            id=item.id or new_id("door"),
            wall_id=item.wall_id,
            position_along_wall=item.position_along_wall,
            width=item.width or wall_settings.door_width,
        )
        for item in payload.doors
    ]
    workspace.engine.add_walls_batch(walls, doors)
    return _respond(workspace)


@router.post("/walls/session/{action}", response_model=SceneResponse, tags=["walls"])
async def wall_session(
    action: Literal["commit", "cancel"],
    workspace: Workspace = Depends(get_workspace),
) -> SceneResponse:
    if action == "commit":
        workspace.engine.commit_walls()
    else:
        workspace.engine.cancel_walls()
    return _respond(workspace)


@router.get("/projects", response_model=list[ProjectOut], tags=["projects"])
async def list_projects(workspace: Workspace = Depends(get_workspace)) -> list[ProjectOut]:
    return [ProjectOut(**item) for item in workspace.list_projects()]


@router.post("/projects", response_model=SceneResponse, status_code=201, tags=["projects"])
async def create_project(payload: ProjectCreate, workspace: Workspace = Depends(get_workspace)) -> SceneResponse:
    workspace.new_project(payload.name)
    return _respond(workspace)


@router.post("/projects/{project_id}/switch", response_model=SceneResponse, tags=["projects"])
async def switch_project(project_id: str, workspace: Workspace = Depends(get_workspace)) -> SceneResponse:
    workspace.switch_project(project_id)
    return _respond(workspace)


@router.patch("/projects/{project_id}", response_model=ProjectOut, tags=["projects"])
async def rename_project(
    project_id: str,
    payload: ProjectRename,
    workspace: Workspace = Depends(get_workspace),
) -> ProjectOut:
    workspace.rename_project(project_id, payload.name)
    workspace.save()
    return next(ProjectOut(**item) for item in workspace.list_projects() if item["id"] == project_id)


@router.delete("/projects/{project_id}", response_model=list[ProjectOut], tags=["projects"])
async def delete_project(project_id: str, workspace: Workspace = Depends(get_workspace)) -> list[ProjectOut]:
    workspace.delete_project(project_id)
    workspace.save()
    return [ProjectOut(**item) for item in workspace.list_projects()]


__all__ = ["router", "get_workspace"]

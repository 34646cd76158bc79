"""FastAPI application exposing the Codeshelf project store."""

from __future__ import annotations

import logging
import re
from functools import lru_cache
from typing import Annotated, NoReturn

from fastapi import Depends, FastAPI, File, HTTPException, Response, UploadFile

from .config import get_settings
from .errors import (
    ArchiveError,
    FileConflict,
    InvalidPath,
    NotFound,
    TransactionFailure,
)
from .models import Project
from .projects import ArchiveCodec, ProjectStore
from .schemas import (
    ActiveProjectRequest,
    ActiveProjectResponse,
    FileCreateRequest,
    FileModel,
    FileRenameRequest,
    FileUpdateRequest,
    HistoryResponse,
    ProjectCreateRequest,
    ProjectDetail,
    ProjectModel,
    ProjectRenameRequest,
    SnapshotModel,
    TemplateModel,
)
from .state import ActiveProjectPointer

LOGGER = logging.getLogger(__name__)

CAPACITY_MESSAGE = "Project limit reached; delete a project before adding another"


@lru_cache(maxsize=1)
def get_store() -> ProjectStore:
    """Return the process-wide store built from settings."""

    settings = get_settings()
    logging.getLogger("codeshelf_backend").setLevel(settings.log_level.upper())
    return ProjectStore.from_settings(settings)


def get_pointer() -> ActiveProjectPointer:
    return ActiveProjectPointer(get_settings().state_path)


StoreDep = Annotated[ProjectStore, Depends(get_store)]
PointerDep = Annotated[ActiveProjectPointer, Depends(get_pointer)]

app = FastAPI(title="Codeshelf API")


def _raise_http(exc: Exception) -> NoReturn:
    if isinstance(exc, NotFound):
        raise HTTPException(status_code=404, detail=str(exc)) from exc
    if isinstance(exc, FileConflict):
        raise HTTPException(status_code=409, detail=str(exc)) from exc
    if isinstance(exc, (InvalidPath, ArchiveError)):
        raise HTTPException(status_code=400, detail=str(exc)) from exc
    if isinstance(exc, TransactionFailure):
        raise HTTPException(status_code=500, detail="Storage transaction failed") from exc
    raise exc


def _require(store: ProjectStore, project_id: str) -> Project:
    project = store.get(project_id)
    if project is None:
        raise HTTPException(status_code=404, detail="Project not found")
    return project


def _detail(store: ProjectStore, project: Project) -> ProjectDetail:
    files = store.list_files(project.id)
    return ProjectDetail(
        **ProjectModel.model_validate(project).model_dump(),
        files=[FileModel.model_validate(record) for record in files],
    )


@app.get("/healthz")
async def healthcheck() -> dict[str, str]:
    """Health check endpoint."""

    return {"status": "ok"}


@app.get("/templates", response_model=list[TemplateModel])
def list_templates(store: StoreDep) -> list[TemplateModel]:
    return [
        TemplateModel(
            id=template.id,
            name=template.name,
            framework=template.framework,
            entry_file=template.entry_file,
            description=template.description,
            paths=sorted(template.files),
        )
        for template in store.templates
    ]


@app.get("/projects", response_model=list[ProjectModel])
def list_projects(store: StoreDep) -> list[ProjectModel]:
    return [ProjectModel.model_validate(project) for project in store.list()]


@app.post("/projects", response_model=ProjectModel, status_code=201)
def create_project(
    payload: ProjectCreateRequest, store: StoreDep, pointer: PointerDep
) -> ProjectModel:
    try:
        project = store.create_from_template_id(payload.template_id, payload.name)
    except (NotFound, InvalidPath, TransactionFailure) as exc:
        _raise_http(exc)
    if project is None:
        raise HTTPException(status_code=409, detail=CAPACITY_MESSAGE)
    pointer.set(project.id)
    return ProjectModel.model_validate(project)


@app.post("/projects/import", response_model=ProjectModel, status_code=201)
def import_project(
    store: StoreDep, pointer: PointerDep, archive: Annotated[UploadFile, File()]
) -> ProjectModel:
    data = archive.file.read()
    try:
        project = ArchiveCodec(store).import_archive(data, archive.filename)
    except (ArchiveError, InvalidPath, TransactionFailure) as exc:
        _raise_http(exc)
    if project is None:
        if store.count() >= store.max_projects:
            raise HTTPException(status_code=409, detail=CAPACITY_MESSAGE)
        raise HTTPException(status_code=400, detail="Archive contains no files")
    pointer.set(project.id)
    return ProjectModel.model_validate(project)


@app.get("/projects/{project_id}", response_model=ProjectDetail)
def get_project(project_id: str, store: StoreDep) -> ProjectDetail:
    return _detail(store, _require(store, project_id))


@app.patch("/projects/{project_id}", response_model=ProjectModel)
def rename_project(
    project_id: str, payload: ProjectRenameRequest, store: StoreDep
) -> ProjectModel:
    _require(store, project_id)
    try:
        store.rename(project_id, payload.name)
    except (NotFound, TransactionFailure) as exc:
        _raise_http(exc)
    return ProjectModel.model_validate(_require(store, project_id))


@app.delete("/projects/{project_id}", status_code=204)
def delete_project(project_id: str, store: StoreDep, pointer: PointerDep) -> Response:
    store.delete(project_id)
    if pointer.get() == project_id:
        pointer.clear()
    return Response(status_code=204)


@app.post("/projects/{project_id}/duplicate", response_model=ProjectModel, status_code=201)
def duplicate_project(
    project_id: str, store: StoreDep, pointer: PointerDep
) -> ProjectModel:
    _require(store, project_id)
    project = store.duplicate(project_id)
    if project is None:
        raise HTTPException(status_code=409, detail=CAPACITY_MESSAGE)
    pointer.set(project.id)
    return ProjectModel.model_validate(project)


@app.get("/projects/{project_id}/files", response_model=list[FileModel])
def list_files(project_id: str, store: StoreDep) -> list[FileModel]:
    try:
        files = store.list_files(project_id)
    except NotFound as exc:
        _raise_http(exc)
    return [FileModel.model_validate(record) for record in files]


@app.post("/projects/{project_id}/files", response_model=FileModel, status_code=201)
def create_file(
    project_id: str, payload: FileCreateRequest, store: StoreDep
) -> FileModel:
    try:
        record = store.create_file(project_id, payload.path, payload.content)
    except (NotFound, FileConflict, InvalidPath, TransactionFailure) as exc:
        _raise_http(exc)
    return FileModel.model_validate(record)


@app.post("/projects/{project_id}/files:rename", response_model=FileModel)
def rename_file(
    project_id: str, payload: FileRenameRequest, store: StoreDep
) -> FileModel:
    try:
        record = store.rename_file(project_id, payload.source, payload.target)
    except (NotFound, FileConflict, InvalidPath, TransactionFailure) as exc:
        _raise_http(exc)
    return FileModel.model_validate(record)


@app.get("/projects/{project_id}/files/{path:path}", response_model=FileModel)
def read_file(project_id: str, path: str, store: StoreDep) -> FileModel:
    record = store.read_file(project_id, path)
    if record is None:
        raise HTTPException(status_code=404, detail="File not found")
    return FileModel.model_validate(record)


@app.put("/projects/{project_id}/files/{path:path}", response_model=FileModel)
def update_file(
    project_id: str, path: str, payload: FileUpdateRequest, store: StoreDep
) -> FileModel:
    try:
        record = store.update_file(
            project_id,
            path,
            payload.content,
            snapshot_label=payload.snapshot_label,
            skip_snapshot=payload.skip_snapshot,
        )
    except (NotFound, InvalidPath, TransactionFailure) as exc:
        _raise_http(exc)
    return FileModel.model_validate(record)


@app.delete("/projects/{project_id}/files/{path:path}", status_code=204)
def delete_file(project_id: str, path: str, store: StoreDep) -> Response:
    try:
        store.delete_file(project_id, path)
    except (NotFound, InvalidPath, TransactionFailure) as exc:
        _raise_http(exc)
    return Response(status_code=204)


@app.get("/projects/{project_id}/snapshots", response_model=list[SnapshotModel])
def list_snapshots(project_id: str, store: StoreDep) -> list[SnapshotModel]:
    try:
        snapshots = store.history(project_id)
    except NotFound as exc:
        _raise_http(exc)
    return [SnapshotModel.model_validate(snapshot) for snapshot in snapshots]


@app.post("/projects/{project_id}/undo", response_model=HistoryResponse)
def undo(project_id: str, store: StoreDep) -> HistoryResponse:
    _require(store, project_id)
    changed = store.undo(project_id)
    return HistoryResponse(
        changed=changed, snapshot_index=_require(store, project_id).snapshot_index
    )


@app.post("/projects/{project_id}/redo", response_model=HistoryResponse)
def redo(project_id: str, store: StoreDep) -> HistoryResponse:
    _require(store, project_id)
    changed = store.redo(project_id)
    return HistoryResponse(
        changed=changed, snapshot_index=_require(store, project_id).snapshot_index
    )


@app.get("/projects/{project_id}/export")
def export_project(project_id: str, store: StoreDep) -> Response:
    data = ArchiveCodec(store).export(project_id)
    if data is None:
        raise HTTPException(status_code=404, detail="Project not found")
    project = _require(store, project_id)
    filename = re.sub(r"[^A-Za-z0-9._-]+", "-", project.name).strip("-") or "project"
    return Response(
        content=data,
        media_type="application/zip",
        headers={"Content-Disposition": f'attachment; filename="{filename}.zip"'},
    )


@app.get("/active-project", response_model=ActiveProjectResponse)
def get_active_project(store: StoreDep, pointer: PointerDep) -> ActiveProjectResponse:
    project = store.resolve_active(pointer)
    return ActiveProjectResponse(
        project=ProjectModel.model_validate(project) if project else None
    )


@app.put("/active-project", response_model=ActiveProjectResponse)
def set_active_project(
    payload: ActiveProjectRequest, store: StoreDep, pointer: PointerDep
) -> ActiveProjectResponse:
    project = _require(store, payload.project_id)
    pointer.set(project.id)
    LOGGER.debug("Active project set to %s", project.id)
    return ActiveProjectResponse(project=ProjectModel.model_validate(project))

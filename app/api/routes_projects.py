from typing import Any, Dict, Optional
from fastapi import APIRouter, Depends, HTTPException
from fastapi.responses import PlainTextResponse
from sqlalchemy.orm import Session
from app.api.errors import view_kind_http_error
from app.core.errors import UnsupportedViewKind
from app.core.resolution import resolve_entity_view
from app.db.session import get_db
from app.db.models import CRMProject
from app.db.projects import create_project, load_config, load_resources, load_sample_data
from app.generators.dashboard_gen.openapi import dump_openapi_yaml, render_openapi
from app.renderers.resolver import ViewResolver
from app.schemas.config import CRMConfig
from app.schemas.projects import ProjectCreateRequest, ProjectResponse
from app.tasks.generation import run_generation

router = APIRouter(prefix="/projects")


def _response(project: CRMProject) -> ProjectResponse:
    return ProjectResponse(
        id=project.id,
        prompt=project.prompt,
        hints=project.hints or {},
        stage=project.stage,
        status=project.status,
        error_message=project.error_message,
        created_at=project.created_at,
        updated_at=project.updated_at,
        config=project.config,
        dashboard_config=project.dashboard_config,
        resources=load_resources(project),
        meta=project.meta or {},
    )


def _get_project(db: Session, project_id: str) -> CRMProject:
    project = db.get(CRMProject, project_id)
    if not project:
        raise HTTPException(status_code=404, detail="Project not found")
    return project


def _get_config(project: CRMProject) -> CRMConfig:
    config = load_config(project)
    if config is None:
        raise HTTPException(status_code=409, detail=f"Project is {project.status.value}; no config yet")
    return config


@router.post("", response_model=ProjectResponse, status_code=202)
def create(req: ProjectCreateRequest, db: Session = Depends(get_db)):
    project = create_project(db, req.prompt, req.hints)
    run_generation.delay(project.id)
    return _response(project)


@router.get("/{project_id}", response_model=ProjectResponse)
def get_project(project_id: str, db: Session = Depends(get_db)):
    return _response(_get_project(db, project_id))


@router.get("/{project_id}/sample-data")
def get_sample_data(project_id: str, db: Session = Depends(get_db)):
    return load_sample_data(_get_project(db, project_id))


@router.get("/{project_id}/openapi.yaml", response_class=PlainTextResponse)
def get_openapi(project_id: str, db: Session = Depends(get_db)):
    config = _get_config(_get_project(db, project_id))
    return dump_openapi_yaml(render_openapi(config))


def _render(project: CRMProject, entity_id: str, view_id: Optional[str], record_id: Optional[str]) -> Dict[str, Any]:
    config = _get_config(project)
    resolved = resolve_entity_view(config, entity_id, view_id)
    if resolved is None:
        raise HTTPException(status_code=404, detail=f"No view for entity '{entity_id}'" + (f" with id '{view_id}'" if view_id else ""))
    entity, view = resolved
    try:
        rendered = ViewResolver().resolve(entity, view, config, load_sample_data(project), record_id=record_id)
    except UnsupportedViewKind as e:
        raise view_kind_http_error(e)
    return rendered.to_dict()


@router.get("/{project_id}/crm/{entity_id}")
def render_default_view(project_id: str, entity_id: str, record_id: Optional[str] = None, db: Session = Depends(get_db)):
    return _render(_get_project(db, project_id), entity_id, None, record_id)


@router.get("/{project_id}/crm/{entity_id}/{view_id}")
def render_view(project_id: str, entity_id: str, view_id: str, record_id: Optional[str] = None, db: Session = Depends(get_db)):
    return _render(_get_project(db, project_id), entity_id, view_id, record_id)

"""Storing and loading generation results on CRMProject rows."""
from __future__ import annotations
from typing import Any, Dict, List, Optional
from sqlalchemy.orm import Session
from app.core.errors import GenerationError, GenerationInvalid
from app.core.workflow import GenerationStage, ProjectStatus
from app.db.models import CRMProject
from app.schemas.config import CRMConfig
from app.schemas.generation import GenerationHints, GenerationResult, SampleData


def create_project(db: Session, prompt: str, hints: Optional[GenerationHints] = None) -> CRMProject:
    project = CRMProject(
        prompt=prompt,
        hints=(hints or GenerationHints()).to_json_dict(),
        meta={},
    )
    db.add(project)
    db.commit()
    db.refresh(project)
    return project


def set_stage(db: Session, project: CRMProject, stage: GenerationStage) -> None:
    project.stage = stage
    db.commit()


def mark_running(db: Session, project: CRMProject) -> None:
    project.status = ProjectStatus.RUNNING
    project.error_message = None
    db.commit()


def store_result(db: Session, project: CRMProject, result: GenerationResult) -> None:
    """Persist every part of a successful generation and mark the project DONE."""
    data = result.to_json_dict()
    project.config = data["config"]
    project.sample_data = data.get("sampleData", {})
    project.dashboard_config = data["dashboardConfig"]
    project.resources = data.get("resources", [])
    project.meta = data.get("meta", {})
    project.status = ProjectStatus.DONE
    project.stage = GenerationStage.DONE
    project.error_message = None
    db.commit()


def mark_failed(db: Session, project: CRMProject, error: Exception) -> None:
    """Record a failed generation. No partial config is stored."""
    project.status = ProjectStatus.FAILED
    project.stage = GenerationStage.FAILED
    project.error_message = str(error)
    meta: Dict[str, Any] = dict(project.meta or {})
    if isinstance(error, GenerationError):
        meta["errorCode"] = error.code
    if isinstance(error, GenerationInvalid):
        meta["validationErrors"] = [e.to_dict() for e in error.errors]
    project.meta = meta
    db.commit()


def load_config(project: CRMProject) -> Optional[CRMConfig]:
    if not project.config:
        return None
    return CRMConfig.model_validate(project.config)


def load_sample_data(project: CRMProject) -> SampleData:
    return dict(project.sample_data or {})


def load_resources(project: CRMProject) -> List[Dict[str, Any]]:
    return list(project.resources or [])

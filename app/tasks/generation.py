from __future__ import annotations
import asyncio
import logging
from typing import Optional
from sqlalchemy.orm import Session
from app.tasks.celery_app import celery_app
from app.db.session import SessionLocal
from app.db.models import CRMProject
from app.db.projects import mark_failed, mark_running, set_stage, store_result
from app.core.workflow import GenerationStage
from app.generators.config_gen.generator import ConfigGenerator
from app.schemas.generation import GenerationHints

log = logging.getLogger(__name__)


def generate_project(db: Session, project_id: str, generator: Optional[ConfigGenerator] = None) -> None:
    """Run full generation for a stored project and persist the outcome on it."""
    project = db.get(CRMProject, project_id)
    if not project:
        log.error("Project not found", extra={"project_id": project_id, "stage": "-"})
        return

    mark_running(db, project)
    set_stage(db, project, GenerationStage.REQUEST)
    log.info("Starting generation", extra={"project_id": project_id, "stage": project.stage.value})

    generator = generator or ConfigGenerator()
    try:
        result = asyncio.run(generator.generate_full(
            project.prompt,
            project_id,
            GenerationHints.model_validate(project.hints or {}),
        ))
    except Exception as e:
        log.exception("Generation failed", extra={"project_id": project_id, "stage": project.stage.value})
        mark_failed(db, project, e)
        return

    store_result(db, project, result)
    log.info("Generation stored", extra={"project_id": project_id, "stage": GenerationStage.DONE.value})


@celery_app.task(name="run_generation")
def run_generation(project_id: str) -> None:
    db: Session = SessionLocal()
    try:
        generate_project(db, project_id)
    finally:
        db.close()

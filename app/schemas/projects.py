from pydantic import BaseModel, Field
from typing import Optional, Dict, Any, List
from datetime import datetime
from app.core.config import settings
from app.core.workflow import GenerationStage, ProjectStatus
from app.schemas.generation import GenerationHints


class ProjectCreateRequest(BaseModel):
    prompt: str = Field(
        ...,
        min_length=settings.min_prompt_length,
        examples=["A CRM for my residential cleaning business: clients, recurring jobs, cleaners and invoices"],
    )
    hints: GenerationHints = GenerationHints()


class GenerateConfigRequest(ProjectCreateRequest):
    pass


class ModifyConfigRequest(BaseModel):
    config: Dict[str, Any]
    instruction: str = Field(..., min_length=3, examples=["Add a priority field to jobs"])


class ProjectResponse(BaseModel):
    id: str
    prompt: str
    hints: Dict[str, Any] = {}
    stage: GenerationStage
    status: ProjectStatus
    error_message: Optional[str] = None
    created_at: datetime
    updated_at: datetime
    config: Optional[Dict[str, Any]] = None
    dashboard_config: Optional[Dict[str, Any]] = None
    resources: List[Dict[str, Any]] = []
    meta: Dict[str, Any] = {}


class ValidationIssueResponse(BaseModel):
    path: str
    message: str


class ValidationResponse(BaseModel):
    valid: bool
    errors: List[ValidationIssueResponse] = []

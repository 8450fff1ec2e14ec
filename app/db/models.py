from __future__ import annotations
import uuid
from datetime import datetime
from sqlalchemy import String, DateTime, Enum, JSON, Text
from sqlalchemy.orm import Mapped, mapped_column
from app.db.session import Base
from app.core.workflow import GenerationStage, ProjectStatus


def _utcnow() -> datetime:
    return datetime.utcnow()


class CRMProject(Base):
    __tablename__ = "crm_projects"

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    created_at: Mapped[datetime] = mapped_column(DateTime, default=_utcnow, nullable=False)
    updated_at: Mapped[datetime] = mapped_column(DateTime, default=_utcnow, onupdate=_utcnow, nullable=False)

    prompt: Mapped[str] = mapped_column(Text, nullable=False)
    hints: Mapped[dict] = mapped_column(JSON, default=dict, nullable=False)

    stage: Mapped[GenerationStage] = mapped_column(Enum(GenerationStage), default=GenerationStage.REQUEST, nullable=False)
    status: Mapped[ProjectStatus] = mapped_column(Enum(ProjectStatus), default=ProjectStatus.QUEUED, nullable=False, index=True)
    error_message: Mapped[str | None] = mapped_column(Text, nullable=True)

    # Populated together once generation succeeds
    config: Mapped[dict | None] = mapped_column(JSON, nullable=True)
    sample_data: Mapped[dict | None] = mapped_column(JSON, nullable=True)
    dashboard_config: Mapped[dict | None] = mapped_column(JSON, nullable=True)
    resources: Mapped[list | None] = mapped_column(JSON, nullable=True)
    meta: Mapped[dict] = mapped_column(JSON, default=dict, nullable=False)

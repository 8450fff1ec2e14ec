from __future__ import annotations
from enum import Enum
from typing import Any, Dict, List, Optional
from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel
from app.schemas.config import CRMConfig

# entity id -> records; each record maps field name -> value and carries an "id"
SampleData = Dict[str, List[Dict[str, Any]]]


class CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    def to_json_dict(self) -> Dict[str, Any]:
        return self.model_dump(by_alias=True, mode="json", exclude_none=True)


class GenerationHints(CamelModel):
    industry: Optional[str] = Field(default=None, examples=["Home services"])
    primary_use_case: Optional[str] = Field(default=None, examples=["Scheduling and invoicing"])


class WidgetKind(str, Enum):
    METRIC = "metric"
    CHART = "chart"
    LIST = "list"


class Widget(CamelModel):
    id: str
    kind: WidgetKind
    title: str
    entity_id: str
    aggregation: Optional[str] = None
    field: Optional[str] = None
    value: Any = None


class DashboardConfig(CamelModel):
    title: str
    subtitle: Optional[str] = None
    widgets: List[Widget] = []


class FieldBinding(CamelModel):
    field: str
    column: str
    type: str


class ResourceDescriptor(CamelModel):
    name: str
    entity_id: str
    label: str
    routes: Dict[str, str]
    operations: Dict[str, str]
    fields: List[FieldBinding] = []


class GenerationResult(CamelModel):
    config: CRMConfig
    sample_data: SampleData = {}
    dashboard_config: DashboardConfig
    resources: List[ResourceDescriptor] = []
    meta: Dict[str, Any] = {}

"""CRMConfig schema: entities, views and navigation of one generated application.

Models are frozen; a validated config is treated as read-only. JSON spelling is
camelCase (``entityId``, ``labelPlural``, ``groupByField``), Python attributes
are snake_case.
"""
from __future__ import annotations
from enum import Enum
from typing import Any, Dict, List, Optional
from pydantic import BaseModel, ConfigDict, model_validator
from pydantic.alias_generators import to_camel
from app.core.naming import humanize, pluralize, singularize


class FieldType(str, Enum):
    TEXT = "text"
    TEXTAREA = "textarea"
    EMAIL = "email"
    PHONE = "phone"
    URL = "url"
    NUMBER = "number"
    CURRENCY = "currency"
    PERCENTAGE = "percentage"
    BOOLEAN = "boolean"
    DATE = "date"
    DATETIME = "datetime"
    ENUM = "enum"
    RELATION = "relation"


class ViewKind(str, Enum):
    TABLE = "table"
    KANBAN = "kanban"
    PIPELINE = "pipeline"
    CALENDAR = "calendar"
    DETAIL = "detail"


FIELD_TYPES = {t.value for t in FieldType}
VIEW_KINDS = {k.value for k in ViewKind}

# Field types a kanban/pipeline view can be grouped by
GROUPABLE_FIELD_TYPES = {FieldType.ENUM.value, FieldType.RELATION.value}
DATE_FIELD_TYPES = {FieldType.DATE.value, FieldType.DATETIME.value}
NUMERIC_FIELD_TYPES = {FieldType.NUMBER.value, FieldType.CURRENCY.value, FieldType.PERCENTAGE.value}

# View kinds that cannot render without a groupByField
GROUPED_VIEW_KINDS = {ViewKind.KANBAN.value, ViewKind.PIPELINE.value}


def _pick(data: Dict[str, Any], *keys: str) -> Any:
    for key in keys:
        if data.get(key):
            return data[key]
    return None


class ConfigModel(BaseModel):
    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        frozen=True,
    )

    def to_json_dict(self) -> Dict[str, Any]:
        return self.model_dump(by_alias=True, mode="json", exclude_none=True)


class Field(ConfigModel):
    name: str
    type: FieldType
    label: str = ""
    required: bool = False
    relation_target: Optional[str] = None
    options: List[str] = []

    @model_validator(mode="before")
    @classmethod
    def _default_label(cls, data: Any) -> Any:
        if isinstance(data, dict) and not data.get("label") and data.get("name"):
            data = {**data, "label": humanize(str(data["name"]))}
        return data


class Entity(ConfigModel):
    id: str
    label: str = ""
    label_plural: str = ""
    fields: List[Field] = []
    description: Optional[str] = None
    icon: Optional[str] = None
    title_field: Optional[str] = None

    @model_validator(mode="before")
    @classmethod
    def _default_labels(cls, data: Any) -> Any:
        if not isinstance(data, dict):
            return data
        label = _pick(data, "label") or humanize(singularize(str(data.get("id") or "")))
        plural = _pick(data, "labelPlural", "label_plural") or pluralize(label)
        return {**data, "label": label, "labelPlural": plural}

    @property
    def field_names(self) -> List[str]:
        return [f.name for f in self.fields]

    def get_field(self, name: str) -> Optional[Field]:
        for field in self.fields:
            if field.name == name:
                return field
        return None

    @property
    def relation_fields(self) -> List[Field]:
        return [f for f in self.fields if f.type == FieldType.RELATION]


class View(ConfigModel):
    id: str
    entity_id: str
    kind: str
    label: str = ""
    is_default: bool = False
    fields_shown: List[str] = []
    group_by_field: Optional[str] = None
    date_field: Optional[str] = None


class NavigationItem(ConfigModel):
    id: str
    label: str
    entity_id: Optional[str] = None
    view_id: Optional[str] = None
    icon: Optional[str] = None
    children: List["NavigationItem"] = []


class CRMConfig(ConfigModel):
    version: str = "1.0.0"
    name: str
    description: Optional[str] = None
    entities: List[Entity]
    views: List[View] = []
    navigation: List[NavigationItem] = []

    @property
    def entity_ids(self) -> List[str]:
        return [e.id for e in self.entities]

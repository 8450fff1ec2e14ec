"""Structural validation of a CRMConfig.

``validate_config`` never raises. It reports every violation it finds in one
pass, ordered by check and then by entity/view declaration order. Only a
missing ``entities`` array short-circuits, since nothing else can be checked
without it.
"""
from __future__ import annotations
from dataclasses import dataclass, field
from typing import Any, Dict, List, Mapping, Optional, Union
from pydantic import BaseModel
from app.schemas.config import (
    FIELD_TYPES,
    VIEW_KINDS,
    GROUPABLE_FIELD_TYPES,
    GROUPED_VIEW_KINDS,
    DATE_FIELD_TYPES,
)


@dataclass(frozen=True)
class ValidationIssue:
    """A single violation, addressed by a JSON-style path into the config."""
    path: str
    message: str

    def to_dict(self) -> Dict[str, str]:
        return {"path": self.path, "message": self.message}

    def __str__(self) -> str:
        return f"{self.path}: {self.message}"


@dataclass
class ValidationResult:
    valid: bool
    errors: List[ValidationIssue] = field(default_factory=list)

    def paths(self) -> List[str]:
        return [e.path for e in self.errors]

    def to_dict(self) -> Dict[str, Any]:
        return {"valid": self.valid, "errors": [e.to_dict() for e in self.errors]}


def _as_raw(config: Any) -> Any:
    if isinstance(config, BaseModel):
        return config.model_dump(by_alias=True, mode="json")
    return config


def _is_blank(value: Any) -> bool:
    return not isinstance(value, str) or not value.strip()


def _has(collection: Any, key: Any) -> bool:
    # raw candidates may carry lists or dicts where ids are expected
    return isinstance(key, str) and key in collection


def _fields_of(entity_fields: Dict[str, Dict[str, Any]], entity_id: Any) -> Optional[Dict[str, Any]]:
    if not isinstance(entity_id, str):
        return None
    return entity_fields.get(entity_id)


def _as_list(raw: Mapping[str, Any], key: str, errors: List[ValidationIssue]) -> List[Any]:
    value = raw.get(key)
    if value is None:
        return []
    if not isinstance(value, list):
        errors.append(ValidationIssue(key, f"'{key}' must be an array"))
        return []
    return value


def validate_config(config: Union[BaseModel, Mapping[str, Any], Any]) -> ValidationResult:
    """Validate a CRMConfig (model or raw mapping) and return a verdict with all errors."""
    raw = _as_raw(config)
    if not isinstance(raw, Mapping):
        return ValidationResult(False, [ValidationIssue("$", "Config must be an object")])

    entities = raw.get("entities")
    if not isinstance(entities, list):
        return ValidationResult(False, [ValidationIssue("entities", "Config must define an entities array")])

    errors: List[ValidationIssue] = []
    views = _as_list(raw, "views", errors)
    navigation = _as_list(raw, "navigation", errors)

    # entity id -> {field name: field type} for the first entity declaring that id
    entity_fields: Dict[str, Dict[str, Any]] = {}
    first_index: Dict[str, int] = {}

    # 1. At least one entity, each with a non-empty unique id
    if not entities:
        errors.append(ValidationIssue("entities", "At least one entity is required"))
    for i, entity in enumerate(entities):
        path = f"entities[{i}]"
        if not isinstance(entity, Mapping):
            errors.append(ValidationIssue(path, "Entity must be an object"))
            continue
        entity_id = entity.get("id")
        if _is_blank(entity_id):
            errors.append(ValidationIssue(f"{path}.id", "Entity id is required"))
        elif entity_id in entity_fields:
            errors.append(ValidationIssue(f"{path}.id", f"Duplicate entity id '{entity_id}'"))
        else:
            entity_fields[entity_id] = {}
            first_index[entity_id] = i

    # 2. Field names unique within an entity, field types recognized
    for i, entity in enumerate(entities):
        if not isinstance(entity, Mapping):
            continue
        path = f"entities[{i}]"
        fields = entity.get("fields")
        if fields is None:
            continue
        if not isinstance(fields, list):
            errors.append(ValidationIssue(f"{path}.fields", "Fields must be an array"))
            continue
        entity_id = entity.get("id")
        # Only the first entity declaring an id owns the field map used by later checks
        owned = entity_fields[entity_id] if isinstance(entity_id, str) and first_index.get(entity_id) == i else None
        seen: set = set()
        for j, fld in enumerate(fields):
            fpath = f"{path}.fields[{j}]"
            if not isinstance(fld, Mapping):
                errors.append(ValidationIssue(fpath, "Field must be an object"))
                continue
            name = fld.get("name")
            if _is_blank(name):
                errors.append(ValidationIssue(f"{fpath}.name", "Field name is required"))
            elif name in seen:
                errors.append(ValidationIssue(f"{fpath}.name", f"Duplicate field name '{name}' in entity '{entity_id}'"))
            else:
                seen.add(name)
            field_type = fld.get("type")
            if not _has(FIELD_TYPES, field_type):
                errors.append(ValidationIssue(f"{fpath}.type", f"Unrecognized field type '{field_type}'"))
            if owned is not None and not _is_blank(name):
                owned.setdefault(name, field_type)

    # 3. Relation fields reference an existing entity
    for i, entity in enumerate(entities):
        if not isinstance(entity, Mapping) or not isinstance(entity.get("fields"), list):
            continue
        for j, fld in enumerate(entity["fields"]):
            if not isinstance(fld, Mapping) or fld.get("type") != "relation":
                continue
            tpath = f"entities[{i}].fields[{j}].relationTarget"
            target = fld.get("relationTarget")
            if _is_blank(target):
                errors.append(ValidationIssue(tpath, f"Relation field '{fld.get('name')}' must declare a target entity"))
            elif target not in entity_fields:
                errors.append(ValidationIssue(tpath, f"Relation target '{target}' does not match any entity"))

    # 4. Views reference an existing entity
    for k, view in enumerate(views):
        path = f"views[{k}]"
        if not isinstance(view, Mapping):
            errors.append(ValidationIssue(path, "View must be an object"))
            continue
        entity_id = view.get("entityId")
        if _is_blank(entity_id):
            errors.append(ValidationIssue(f"{path}.entityId", "View entityId is required"))
        elif entity_id not in entity_fields:
            errors.append(ValidationIssue(f"{path}.entityId", f"View references unknown entity '{entity_id}'"))

    # 5. View kinds recognized, grouping fields present and groupable
    for k, view in enumerate(views):
        if not isinstance(view, Mapping):
            continue
        path = f"views[{k}]"
        kind = view.get("kind")
        if not _has(VIEW_KINDS, kind):
            errors.append(ValidationIssue(f"{path}.kind", f"Unrecognized view kind '{kind}'"))
        group_by = view.get("groupByField")
        if _has(GROUPED_VIEW_KINDS, kind) and _is_blank(group_by):
            errors.append(ValidationIssue(f"{path}.groupByField", f"View kind '{kind}' requires a groupByField"))
            continue
        if _is_blank(group_by):
            continue
        fields = _fields_of(entity_fields, view.get("entityId"))
        if fields is None:
            continue
        if group_by not in fields:
            errors.append(ValidationIssue(
                f"{path}.groupByField",
                f"Grouping field '{group_by}' does not exist on entity '{view.get('entityId')}'",
            ))
        elif not _has(GROUPABLE_FIELD_TYPES, fields[group_by]):
            errors.append(ValidationIssue(
                f"{path}.groupByField",
                f"Field '{group_by}' of type '{fields[group_by]}' cannot be used for grouping",
            ))

    # 6. At most one default view per entity
    defaults: Dict[str, Any] = {}
    for k, view in enumerate(views):
        if not isinstance(view, Mapping) or view.get("isDefault") is not True:
            continue
        entity_id = view.get("entityId")
        if not isinstance(entity_id, str):
            continue
        if entity_id in defaults:
            errors.append(ValidationIssue(
                f"views[{k}].isDefault",
                f"Entity '{entity_id}' already has default view '{defaults[entity_id]}'",
            ))
        else:
            defaults[entity_id] = view.get("id")

    # 7. Field references on entities and views
    for i, entity in enumerate(entities):
        if not isinstance(entity, Mapping):
            continue
        title_field = entity.get("titleField")
        fields = _fields_of(entity_fields, entity.get("id"))
        if title_field is not None and fields is not None and not _has(fields, title_field):
            errors.append(ValidationIssue(f"entities[{i}].titleField", f"Title field '{title_field}' does not exist"))
    for k, view in enumerate(views):
        if not isinstance(view, Mapping):
            continue
        fields = _fields_of(entity_fields, view.get("entityId"))
        if fields is None:
            continue
        shown = view.get("fieldsShown") or []
        if isinstance(shown, list):
            for n, name in enumerate(shown):
                if not _has(fields, name) and name != "id":
                    errors.append(ValidationIssue(f"views[{k}].fieldsShown[{n}]", f"Field '{name}' does not exist"))
        date_field = view.get("dateField")
        if date_field is not None:
            if not _has(fields, date_field):
                errors.append(ValidationIssue(f"views[{k}].dateField", f"Date field '{date_field}' does not exist"))
            elif not _has(DATE_FIELD_TYPES, fields[date_field]):
                errors.append(ValidationIssue(f"views[{k}].dateField", f"Field '{date_field}' is not a date field"))

    # 8. Navigation entries resolve
    view_ids = {v.get("id") for v in views if isinstance(v, Mapping) and isinstance(v.get("id"), str)}
    _validate_navigation(navigation, "navigation", set(entity_fields), view_ids, errors)

    # 9. View ids present and unique
    seen_views: set = set()
    for k, view in enumerate(views):
        if not isinstance(view, Mapping):
            continue
        view_id = view.get("id")
        if _is_blank(view_id):
            errors.append(ValidationIssue(f"views[{k}].id", "View id is required"))
        elif view_id in seen_views:
            errors.append(ValidationIssue(f"views[{k}].id", f"Duplicate view id '{view_id}'"))
        else:
            seen_views.add(view_id)

    if _is_blank(raw.get("name")):
        errors.append(ValidationIssue("name", "Config name is required"))

    return ValidationResult(valid=not errors, errors=errors)


def _validate_navigation(
    items: List[Any],
    path: str,
    entity_ids: set,
    view_ids: set,
    errors: List[ValidationIssue],
) -> None:
    for n, item in enumerate(items):
        ipath = f"{path}[{n}]"
        if not isinstance(item, Mapping):
            errors.append(ValidationIssue(ipath, "Navigation entry must be an object"))
            continue
        entity_id: Optional[str] = item.get("entityId")
        view_id: Optional[str] = item.get("viewId")
        if entity_id is not None and not _has(entity_ids, entity_id):
            errors.append(ValidationIssue(f"{ipath}.entityId", f"Navigation references unknown entity '{entity_id}'"))
        if view_id is not None and not _has(view_ids, view_id):
            errors.append(ValidationIssue(f"{ipath}.viewId", f"Navigation references unknown view '{view_id}'"))
        children = item.get("children")
        if isinstance(children, list):
            _validate_navigation(children, f"{ipath}.children", entity_ids, view_ids, errors)

"""Normalization of raw CRMConfig candidates returned by the language model.

The normalizer never rejects anything: it assigns missing ids, coerces known
spelling variants to canonical values and drops keys the schema does not
know. Whatever it cannot repair is left for ``validate_config`` to report.
"""
from __future__ import annotations
import re
from typing import Any, Dict, List, Optional
from app.core.naming import humanize, pluralize, singularize, slugify
from app.schemas.config import FieldType, ViewKind

ALLOWED_TOP_KEYS = {"version", "name", "description", "entities", "views", "navigation"}
ALLOWED_ENTITY_KEYS = {"id", "label", "labelPlural", "fields", "description", "icon", "titleField"}
ALLOWED_FIELD_KEYS = {"name", "type", "label", "required", "relationTarget", "options"}
ALLOWED_VIEW_KEYS = {"id", "entityId", "kind", "label", "isDefault", "fieldsShown", "groupByField", "dateField"}
ALLOWED_NAV_KEYS = {"id", "label", "entityId", "viewId", "icon", "children"}

# Keys spelled differently by older prompts or by the model itself
ENTITY_KEY_ALIASES = {
    "label_plural": "labelPlural",
    "namePlural": "labelPlural",
    "title_field": "titleField",
}
FIELD_KEY_ALIASES = {
    "targetEntity": "relationTarget",
    "relation_target": "relationTarget",
    "relatesTo": "relationTarget",
    "references": "relationTarget",
    "target": "relationTarget",
    "enumOptions": "options",
    "values": "options",
    "choices": "options",
}
VIEW_KEY_ALIASES = {
    "type": "kind",
    "entity": "entityId",
    "entity_id": "entityId",
    "is_default": "isDefault",
    "default": "isDefault",
    "groupBy": "groupByField",
    "group_by": "groupByField",
    "group_by_field": "groupByField",
    "startDateField": "dateField",
    "date_field": "dateField",
    "fields_shown": "fieldsShown",
}
NAV_KEY_ALIASES = {
    "entity_id": "entityId",
    "view_id": "viewId",
    "items": "children",
}

FIELD_TYPE_ALIASES = {
    FieldType.TEXT.value: ["string", "str", "varchar", "char", "shorttext", "uuid", "time", "json"],
    FieldType.TEXTAREA.value: ["longtext", "richtext", "multiline", "paragraph", "markdown", "html", "note", "notes"],
    FieldType.EMAIL.value: ["emailaddress", "mail"],
    FieldType.PHONE.value: ["tel", "telephone", "phonenumber", "mobile"],
    FieldType.URL.value: ["link", "website", "uri", "hyperlink", "file", "image"],
    FieldType.NUMBER.value: ["int", "integer", "float", "double", "decimal", "numeric", "quantity"],
    FieldType.CURRENCY.value: ["money", "price", "amount"],
    FieldType.PERCENTAGE.value: ["percent", "pct"],
    FieldType.BOOLEAN.value: ["bool", "checkbox", "toggle", "switch", "yesno", "flag"],
    FieldType.DATE.value: ["day"],
    FieldType.DATETIME.value: ["timestamp", "datetimetz", "createdat", "updatedat"],
    FieldType.ENUM.value: ["select", "dropdown", "choice", "picklist", "status", "radio", "singleselect", "multiselect"],
    FieldType.RELATION.value: [
        "relationship", "reference", "ref", "lookup", "foreignkey", "fk", "belongsto", "linkto", "manytoone",
    ],
}
VIEW_KIND_ALIASES = {
    ViewKind.TABLE.value: ["list", "grid", "datatable", "spreadsheet"],
    ViewKind.KANBAN.value: ["board", "cards", "kanbanboard"],
    ViewKind.PIPELINE.value: ["funnel", "stages", "dealpipeline"],
    ViewKind.CALENDAR.value: ["agenda", "schedule"],
    ViewKind.DETAIL.value: ["form", "record", "show", "details", "profile"],
}

# Field types describing the implicit record id; such fields are dropped
ID_FIELD_TYPES = {"autoid", "autoincrement", "primarykey", "pk"}


def _squash(value: str) -> str:
    return re.sub(r'[\s_\-]+', '', value).lower()


def _build_alias_index(aliases: Dict[str, List[str]]) -> Dict[str, str]:
    index = {}
    for canonical, variants in aliases.items():
        index[_squash(canonical)] = canonical
        for variant in variants:
            index[_squash(variant)] = canonical
    return index


_FIELD_TYPE_INDEX = _build_alias_index(FIELD_TYPE_ALIASES)
_VIEW_KIND_INDEX = _build_alias_index(VIEW_KIND_ALIASES)


def canonical_field_type(value: Any) -> Any:
    """Map a type spelling to its canonical value; unknown spellings are returned unchanged."""
    if not isinstance(value, str):
        return value
    return _FIELD_TYPE_INDEX.get(_squash(value), value)


def canonical_view_kind(value: Any) -> Any:
    if not isinstance(value, str):
        return value
    return _VIEW_KIND_INDEX.get(_squash(value), value)


def _rename_keys(item: Dict[str, Any], aliases: Dict[str, str]) -> Dict[str, Any]:
    renamed = dict(item)
    for alias, key in aliases.items():
        if alias in renamed and key not in renamed:
            renamed[key] = renamed.pop(alias)
    return renamed


def _keep(item: Dict[str, Any], allowed: set) -> Dict[str, Any]:
    return {k: v for k, v in item.items() if k in allowed}


def _unique_id(base: str, taken: set) -> str:
    candidate = base
    n = 2
    while candidate in taken:
        candidate = f"{base}_{n}"
        n += 1
    taken.add(candidate)
    return candidate


def _explicit_ids(items: List[Dict[str, Any]]) -> set:
    return {item["id"] for item in items if isinstance(item.get("id"), str) and item["id"]}


def _as_items(value: Any, key_name: str) -> List[Dict[str, Any]]:
    """Accept either a list of objects or an object keyed by id/name."""
    if isinstance(value, list):
        return [dict(v) for v in value if isinstance(v, dict)]
    if isinstance(value, dict):
        items = []
        for key, item in value.items():
            if isinstance(item, dict):
                items.append({key_name: key, **item})
        return items
    return []


def _as_bool(value: Any) -> bool:
    if isinstance(value, str):
        return value.strip().lower() in ("true", "yes", "1", "y")
    return bool(value)


def _normalize_options(options: Any) -> List[str]:
    if not isinstance(options, list):
        return []
    values = []
    for opt in options:
        if isinstance(opt, dict):
            opt = opt.get("value", opt.get("label"))
        if isinstance(opt, (str, int, float)) and not isinstance(opt, bool):
            value = str(opt)
            if value not in values:
                values.append(value)
    return values


def _normalize_field(raw: Dict[str, Any]) -> Optional[Dict[str, Any]]:
    item = _rename_keys(raw, FIELD_KEY_ALIASES)
    if not item.get("name"):
        item["name"] = item.get("id") or slugify(str(item.get("label") or ""))
    raw_type = item.get("type")
    if isinstance(raw_type, str) and _squash(raw_type) in ID_FIELD_TYPES:
        return None
    if raw_type is None:
        if item.get("relationTarget"):
            raw_type = FieldType.RELATION.value
        elif item.get("options"):
            raw_type = FieldType.ENUM.value
        else:
            raw_type = FieldType.TEXT.value
    item["type"] = canonical_field_type(raw_type)
    if "required" in item:
        item["required"] = _as_bool(item["required"])
    if "options" in item:
        item["options"] = _normalize_options(item["options"])
    return _keep(item, ALLOWED_FIELD_KEYS)


def _normalize_entity(raw: Dict[str, Any], index: int, taken: set) -> Dict[str, Any]:
    item = _rename_keys(raw, ENTITY_KEY_ALIASES)
    # "name" is the singular PascalCase name in older prompts
    if not item.get("label") and isinstance(item.get("name"), str):
        item["label"] = humanize(item["name"])
    if not item.get("id"):
        source = item.get("labelPlural") or item.get("label") or ""
        base = slugify(str(source)) or f"entity_{index + 1}"
        item["id"] = _unique_id(base, taken)
    elif isinstance(item["id"], str):
        taken.add(item["id"])
    if not item.get("label"):
        item["label"] = humanize(singularize(str(item["id"])))
    if not item.get("labelPlural"):
        item["labelPlural"] = pluralize(str(item["label"]))

    fields = []
    for field in _as_items(item.get("fields"), "name"):
        normalized = _normalize_field(field)
        if normalized is not None:
            fields.append(normalized)
    item["fields"] = fields
    return _keep(item, ALLOWED_ENTITY_KEYS)


def _entity_lookup(entities: List[Dict[str, Any]]) -> Dict[str, Optional[str]]:
    """Map lowercase id/label/plural spellings to entity ids; ambiguous spellings map to None."""
    lookup: Dict[str, Optional[str]] = {}
    for entity in entities:
        entity_id = entity.get("id")
        if not isinstance(entity_id, str):
            continue
        spellings = {entity_id, singularize(entity_id), pluralize(entity_id)}
        for key in ("label", "labelPlural"):
            if isinstance(entity.get(key), str):
                spellings.add(entity[key])
        for spelling in spellings:
            squashed = _squash(spelling)
            if squashed in lookup and lookup[squashed] != entity_id:
                lookup[squashed] = None
            else:
                lookup[squashed] = entity_id
    return lookup


def _repoint(value: Any, ids: set, lookup: Dict[str, Optional[str]]) -> Any:
    if not isinstance(value, str) or value in ids:
        return value
    return lookup.get(_squash(value)) or value


def _field_list(value: Any) -> List[str]:
    if not isinstance(value, list):
        return []
    names = []
    for col in value:
        if isinstance(col, dict):
            col = col.get("field") or col.get("name")
        if isinstance(col, str) and col not in names:
            names.append(col)
    return names


def _normalize_view(raw: Dict[str, Any], taken: set, ids: set, lookup: Dict[str, Optional[str]]) -> Dict[str, Any]:
    item = _rename_keys(raw, VIEW_KEY_ALIASES)
    item["kind"] = canonical_view_kind(item.get("kind"))
    item["entityId"] = _repoint(item.get("entityId"), ids, lookup)
    if "fieldsShown" not in item:
        # kanban "columns" describe lanes, not fields, and yield no names
        for legacy in ("columns", "fields", "cardFields"):
            if _field_list(item.get(legacy)):
                item["fieldsShown"] = item[legacy]
                break
    if "fieldsShown" in item:
        item["fieldsShown"] = _field_list(item["fieldsShown"])
    if "isDefault" in item:
        item["isDefault"] = _as_bool(item["isDefault"])
    if not item.get("label") and isinstance(item.get("name"), str):
        item["label"] = item["name"]
    if not item.get("id"):
        base = f"{item.get('entityId') or 'view'}-{item.get('kind') or 'view'}"
        item["id"] = _unique_id(base, taken)
    elif isinstance(item["id"], str):
        taken.add(item["id"])
    if not item.get("label") and isinstance(item.get("kind"), str):
        item["label"] = humanize(item["kind"])
    return _keep(item, ALLOWED_VIEW_KEYS)


def _normalize_navigation(
    items: Any,
    taken: set,
    entities: Dict[str, Dict[str, Any]],
    ids: set,
    lookup: Dict[str, Optional[str]],
) -> List[Dict[str, Any]]:
    normalized = []
    for n, raw in enumerate(_as_items(items, "id")):
        item = _rename_keys(raw, NAV_KEY_ALIASES)
        if "entityId" in item:
            item["entityId"] = _repoint(item["entityId"], ids, lookup)
        target = item.get("entityId") if isinstance(item.get("entityId"), str) else None
        if not item.get("label"):
            if target and target in entities:
                item["label"] = entities[target].get("labelPlural")
            else:
                item["label"] = humanize(str(item.get("id") or item.get("viewId") or f"item {n + 1}"))
        if not item.get("id"):
            item["id"] = _unique_id(slugify(str(item["label"])) or f"nav_{n + 1}", taken)
        elif isinstance(item["id"], str):
            taken.add(item["id"])
        if "children" in item:
            item["children"] = _normalize_navigation(item["children"], taken, entities, ids, lookup)
        normalized.append(_keep(item, ALLOWED_NAV_KEYS))
    return normalized


def normalize_config(raw: Any) -> Any:
    """
    Normalize a raw CRMConfig candidate.

    Args:
        raw: Parsed JSON object returned by the language model

    Returns:
        A new dict in canonical shape, or ``raw`` unchanged when it is not an object
    """
    if not isinstance(raw, dict):
        return raw
    # Some responses wrap the config in a single top-level key
    if "entities" not in raw and len(raw) == 1:
        inner = next(iter(raw.values()))
        if isinstance(inner, dict) and "entities" in inner:
            raw = inner

    config = _keep(raw, ALLOWED_TOP_KEYS)
    if "entities" not in raw:
        return config

    if not isinstance(raw["entities"], (list, dict)):
        return config

    raw_entities = _as_items(raw["entities"], "id")
    entity_ids_taken = _explicit_ids(raw_entities)
    entities = [_normalize_entity(entity, i, entity_ids_taken) for i, entity in enumerate(raw_entities)]
    config["entities"] = entities

    ids = {e["id"] for e in entities if isinstance(e.get("id"), str)}
    lookup = _entity_lookup(entities)
    for entity in entities:
        for field in entity["fields"]:
            if field.get("type") == FieldType.RELATION.value and "relationTarget" in field:
                field["relationTarget"] = _repoint(field["relationTarget"], ids, lookup)

    raw_views = _as_items(raw.get("views"), "id")
    view_ids_taken = _explicit_ids(raw_views)
    config["views"] = [_normalize_view(view, view_ids_taken, ids, lookup) for view in raw_views]

    by_id = {e["id"]: e for e in entities if isinstance(e.get("id"), str)}
    if raw.get("navigation"):
        config["navigation"] = _normalize_navigation(raw["navigation"], set(), by_id, ids, lookup)
    else:
        config["navigation"] = [
            {"id": f"nav-{entity_id}", "label": entity["labelPlural"], "entityId": entity_id}
            for entity_id, entity in by_id.items()
        ]
    return config

"""Prompt text for CRM configuration generation."""
import json
from typing import Any, Dict, Iterable, Optional
from app.schemas.config import FIELD_TYPES, VIEW_KINDS
from app.schemas.generation import GenerationHints

CONFIG_SYSTEM_PROMPT = f"""You are a CRM configuration architect. You turn a short business description
into a complete CRM configuration expressed as a single JSON object.

# CRMConfig schema

{{
  "version": "1.0.0",
  "name": "CRM name",
  "description": "One sentence",
  "entities": [Entity, ...],
  "views": [View, ...],
  "navigation": [NavigationItem, ...]
}}

Entity:
{{
  "id": "clients",                 // lowercase slug, unique
  "label": "Client",
  "labelPlural": "Clients",
  "icon": "users",
  "titleField": "name",            // field that identifies a record
  "fields": [Field, ...]
}}

Field:
{{
  "name": "status",                // camelCase, unique within the entity
  "type": "enum",
  "label": "Status",
  "required": true,
  "options": ["new", "active"],    // enum fields only
  "relationTarget": "clients"      // relation fields only: id of another entity
}}

Field types: {", ".join(sorted(FIELD_TYPES))}.
Do not declare an "id" field; every record already has one.

View:
{{
  "id": "clients-table",           // unique
  "entityId": "clients",
  "kind": "table",
  "label": "All Clients",
  "isDefault": true,               // at most one default view per entity
  "fieldsShown": ["name", "email"],
  "groupByField": "status",        // required for kanban and pipeline
  "dateField": "scheduledAt"       // calendar views: a date or datetime field
}}

View kinds: {", ".join(sorted(VIEW_KINDS))}.
A kanban or pipeline view must group by an enum or relation field of its entity.

NavigationItem:
{{ "id": "nav-clients", "label": "Clients", "entityId": "clients", "viewId": "clients-table" }}

# Rules

1. Output only the JSON object. No explanations, no markdown.
2. Every relationTarget and every view entityId must be the id of a declared entity.
3. Give each entity one table view marked isDefault, and add a kanban or pipeline view
   for entities with a status or stage.
4. Use enum fields with explicit options for statuses, stages, priorities and categories.
5. Use currency for money, date or datetime for schedules, email, phone and url where they apply.
6. Prefer 3 to 7 entities for a small business.
"""

MODIFY_SYSTEM_SUFFIX = """
# Modifying an existing configuration

You receive the current configuration and a change request. Return the complete updated
configuration, keeping every id the change does not touch.
"""


def _not_specified(value: Optional[str]) -> str:
    return value if value else "Not specified"


def build_user_message(prompt: str, hints: Optional[GenerationHints] = None) -> str:
    hints = hints or GenerationHints()
    return (
        "Business context:\n"
        f"Industry: {_not_specified(hints.industry)}\n"
        f"Primary use case: {_not_specified(hints.primary_use_case)}\n\n"
        f"User request: {prompt}\n\n"
        "Generate the complete CRM configuration."
    )


def build_repair_message(
    request_message: str,
    candidate: Optional[Dict[str, Any]],
    errors: Iterable[Any],
) -> str:
    """User message for the single repair attempt: the original request, the rejected JSON and its errors."""
    lines = [request_message, ""]
    if candidate is not None:
        lines.append("Your previous configuration was:")
        lines.append(json.dumps(candidate, indent=2))
        lines.append("")
    lines.append("It failed validation with these errors:")
    lines.extend(f"- {error}" for error in errors)
    lines.append("")
    lines.append("Return a corrected, complete configuration that fixes every error.")
    return "\n".join(lines)


def build_modify_message(existing_config: Dict[str, Any], instruction: str) -> str:
    return (
        "Current configuration:\n"
        f"{json.dumps(existing_config, indent=2)}\n\n"
        f"Change request: {instruction}\n\n"
        "Return the complete updated configuration."
    )

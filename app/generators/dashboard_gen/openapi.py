"""OpenAPI 3.0.3 projection of the derived resources."""
import re
from typing import Any, Dict, List, Optional
import yaml
from app.core.naming import humanize
from app.generators.dashboard_gen.resources import derive_resources, entity_to_path
from app.schemas.config import CRMConfig, Entity, Field, FieldType
from app.schemas.generation import ResourceDescriptor

ERROR_SCHEMA = {
    "type": "object",
    "properties": {
        "error": {"type": "string", "description": "Error message"},
        "code": {"type": "string", "description": "Error code"},
    },
    "required": ["error"],
}

TYPE_MAP = {
    FieldType.NUMBER: {"type": "number"},
    FieldType.CURRENCY: {"type": "number", "format": "double"},
    FieldType.PERCENTAGE: {"type": "number", "minimum": 0, "maximum": 100},
    FieldType.BOOLEAN: {"type": "boolean"},
    FieldType.DATE: {"type": "string", "format": "date"},
    FieldType.DATETIME: {"type": "string", "format": "date-time"},
    FieldType.EMAIL: {"type": "string", "format": "email"},
    FieldType.URL: {"type": "string", "format": "uri"},
}


def schema_name(entity: Entity) -> str:
    """PascalCase component name, e.g. ``Service Job`` -> ``ServiceJob``."""
    name = "".join(word.capitalize() for word in humanize(entity.label or entity.id).split())
    return re.sub(r"[^A-Za-z0-9]", "", name) or re.sub(r"[^A-Za-z0-9_]", "_", entity.id)


def field_to_json_schema(field: Field) -> Dict[str, Any]:
    """Convert a config field to a JSON schema property."""
    schema = dict(TYPE_MAP.get(field.type, {"type": "string"}))
    if field.type == FieldType.ENUM and field.options:
        schema["enum"] = list(field.options)
    if field.type == FieldType.RELATION:
        schema["description"] = f"Id of a {field.relation_target} record"
    elif field.label:
        schema["description"] = field.label
    return schema


def entity_to_schemas(entity: Entity) -> Dict[str, Dict[str, Any]]:
    """Generate base, Create, and Update schemas for an entity."""
    name = schema_name(entity)
    properties = {
        field.name: field_to_json_schema(field)
        for field in entity.fields
        if field.name != "id"
    }
    required = [f.name for f in entity.fields if f.required and f.name != "id"]

    base_schema: Dict[str, Any] = {
        "type": "object",
        "properties": {"id": {"type": "string"}, **properties},
        "required": ["id"] + required,
    }
    create_schema: Dict[str, Any] = {"type": "object", "properties": dict(properties)}
    if required:
        create_schema["required"] = required
    # Update schema (all fields optional)
    update_schema = {"type": "object", "properties": dict(properties)}

    return {
        name: base_schema,
        f"{name}Create": create_schema,
        f"{name}Update": update_schema,
    }


def _ref(name: str) -> Dict[str, str]:
    return {"$ref": f"#/components/schemas/{name}"}


def _json(schema: Dict[str, Any]) -> Dict[str, Any]:
    return {"application/json": {"schema": schema}}


def get_error_responses() -> Dict[str, Any]:
    """Get standard error responses for operations."""
    return {
        "400": {"description": "Bad Request", "content": _json(_ref("Error"))},
        "404": {"description": "Not Found", "content": _json(_ref("Error"))},
        "500": {"description": "Internal Server Error", "content": _json(_ref("Error"))},
    }


def generate_crud_paths(entity: Entity, resource: ResourceDescriptor) -> Dict[str, Any]:
    """Generate the list/create/read/update/delete paths for one resource."""
    name = schema_name(entity)
    tag = resource.label
    list_path = f"/api/{entity_to_path(entity.id)}"
    detail_path = f"{list_path}/{{id}}"
    id_param = {"name": "id", "in": "path", "required": True, "schema": {"type": "string"}, "description": f"{entity.label} ID"}

    def responses(status: str, schema: Dict[str, Any], description: str = "Successful response") -> Dict[str, Any]:
        result = {status: {"description": description, "content": _json(schema)}}
        result.update(get_error_responses())
        return result

    list_schema = {
        "type": "object",
        "properties": {
            "items": {"type": "array", "items": _ref(name)},
            "total": {"type": "integer"},
        },
        "required": ["items", "total"],
    }
    return {
        list_path: {
            "get": {
                "operationId": f"{resource.name}_list",
                "tags": [tag],
                "summary": f"List {entity.label_plural}",
                "parameters": [
                    {"name": "limit", "in": "query", "schema": {"type": "integer", "minimum": 1, "default": 100}, "description": "Maximum number of items to return"},
                    {"name": "offset", "in": "query", "schema": {"type": "integer", "minimum": 0, "default": 0}, "description": "Number of items to skip"},
                    {"name": "q", "in": "query", "schema": {"type": "string"}, "description": "Search query", "required": False},
                ],
                "responses": responses("200", list_schema),
            },
            "post": {
                "operationId": f"{resource.name}_create",
                "tags": [tag],
                "summary": f"Create a new {entity.label}",
                "requestBody": {"required": True, "content": _json(_ref(f"{name}Create"))},
                "responses": responses("201", _ref(name), "Created"),
            },
        },
        detail_path: {
            "get": {
                "operationId": f"{resource.name}_read",
                "tags": [tag],
                "summary": f"Get a {entity.label} by ID",
                "parameters": [id_param],
                "responses": responses("200", _ref(name)),
            },
            "patch": {
                "operationId": f"{resource.name}_update",
                "tags": [tag],
                "summary": f"Update a {entity.label}",
                "parameters": [id_param],
                "requestBody": {"required": True, "content": _json(_ref(f"{name}Update"))},
                "responses": responses("200", _ref(name)),
            },
            "delete": {
                "operationId": f"{resource.name}_delete",
                "tags": [tag],
                "summary": f"Delete a {entity.label}",
                "parameters": [id_param],
                "responses": responses("200", {
                    "type": "object",
                    "properties": {"deleted": {"type": "boolean"}},
                    "required": ["deleted"],
                }),
            },
        },
    }


def render_openapi(config: CRMConfig, resources: Optional[List[ResourceDescriptor]] = None) -> Dict[str, Any]:
    """
    Build an OpenAPI document for the CRUD surface of every entity.

    Args:
        config: A validated config
        resources: Descriptors from derive_resources; derived when omitted

    Returns:
        OpenAPI 3.0.3 document as a dict
    """
    resources = resources if resources is not None else derive_resources(config)
    by_entity = {r.entity_id: r for r in resources}
    schemas: Dict[str, Any] = {"Error": ERROR_SCHEMA}
    paths: Dict[str, Any] = {}
    tags = []
    for entity in config.entities:
        resource = by_entity.get(entity.id)
        if resource is None:
            continue
        schemas.update(entity_to_schemas(entity))
        paths.update(generate_crud_paths(entity, resource))
        tags.append({"name": resource.label})

    return {
        "openapi": "3.0.3",
        "info": {
            "title": f"{config.name} API",
            "version": config.version,
            "description": config.description or f"Data API generated for {config.name}",
        },
        "servers": [{"url": "http://localhost:8080", "description": "Development server"}],
        "tags": tags,
        "paths": paths,
        "components": {"schemas": schemas},
    }


def dump_openapi_yaml(document: Dict[str, Any]) -> str:
    return yaml.dump(document, default_flow_style=False, sort_keys=False, allow_unicode=True)

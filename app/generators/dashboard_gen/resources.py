"""Per-entity resource descriptors for a generic CRUD data framework."""
from typing import List
from app.core.naming import to_kebab_case, to_snake_case
from app.schemas.config import CRMConfig, Entity, Field, FieldType
from app.schemas.generation import FieldBinding, ResourceDescriptor

ID_BINDING = FieldBinding(field="id", column="id", type=FieldType.TEXT.value)


def entity_to_path(entity_id: str) -> str:
    """Convert an entity id to an API path segment (snake_case ids keep their underscores)."""
    if "_" in entity_id:
        return to_snake_case(entity_id)
    return to_kebab_case(entity_id)


def field_column(field: Field) -> str:
    column = to_snake_case(field.name)
    if field.type == FieldType.RELATION and not column.endswith("_id"):
        column = f"{column}_id"
    return column


def entity_to_resource(entity: Entity) -> ResourceDescriptor:
    base = f"/crm/{entity.id}"
    api = f"/api/{entity_to_path(entity.id)}"
    bindings = [ID_BINDING]
    for field in entity.fields:
        if field.name == "id":
            continue
        bindings.append(FieldBinding(field=field.name, column=field_column(field), type=field.type.value))
    return ResourceDescriptor(
        name=to_snake_case(entity.id),
        entity_id=entity.id,
        label=entity.label_plural,
        routes={
            "list": base,
            "create": f"{base}/new",
            "show": f"{base}/:id",
            "edit": f"{base}/:id/edit",
        },
        operations={
            "list": f"GET {api}",
            "create": f"POST {api}",
            "read": f"GET {api}/{{id}}",
            "update": f"PATCH {api}/{{id}}",
            "delete": f"DELETE {api}/{{id}}",
        },
        fields=bindings,
    )


def derive_resources(config: CRMConfig) -> List[ResourceDescriptor]:
    """One descriptor per entity, in declaration order."""
    return [entity_to_resource(entity) for entity in config.entities]

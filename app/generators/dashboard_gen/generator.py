"""Dashboard widgets derived from the shape of a CRMConfig."""
from typing import Any, Dict, List, Optional
from app.core.resolution import get_views_for_entity
from app.schemas.config import GROUPABLE_FIELD_TYPES, CRMConfig, Entity, Field, FieldType
from app.schemas.generation import DashboardConfig, SampleData, Widget, WidgetKind


def chart_field(config: CRMConfig, entity: Entity) -> Optional[Field]:
    """First groupable field that one of the entity's views groups by, in view declaration order."""
    for view in get_views_for_entity(config, entity.id):
        if not view.group_by_field:
            continue
        field = entity.get_field(view.group_by_field)
        if field is not None and field.type.value in GROUPABLE_FIELD_TYPES:
            return field
    return None


def group_counts(field: Field, records: List[Dict[str, Any]]) -> Dict[str, int]:
    counts: Dict[str, int] = {}
    if field.type == FieldType.ENUM:
        counts = {option: 0 for option in field.options}
    for record in records:
        value = record.get(field.name)
        if value is None:
            continue
        key = str(value)
        counts[key] = counts.get(key, 0) + 1
    return counts


def derive_dashboard(config: CRMConfig, sample_data: Optional[SampleData] = None) -> DashboardConfig:
    """
    Derive the dashboard for a config.

    Each entity gets a count metric; an entity with a view grouped by one of
    its enum/relation fields also gets a breakdown chart over that field.
    Widget values are filled only when sample data is given.
    """
    widgets: List[Widget] = []
    for entity in config.entities:
        records = sample_data.get(entity.id, []) if sample_data is not None else None
        widgets.append(Widget(
            id=f"{entity.id}-count",
            kind=WidgetKind.METRIC,
            title=f"Total {entity.label_plural}",
            entity_id=entity.id,
            aggregation="count",
            value=len(records) if records is not None else None,
        ))
        field = chart_field(config, entity)
        if field is None:
            continue
        widgets.append(Widget(
            id=f"{entity.id}-by-{field.name}",
            kind=WidgetKind.CHART,
            title=f"{entity.label_plural} by {field.label}",
            entity_id=entity.id,
            aggregation="group_count",
            field=field.name,
            value=group_counts(field, records) if records is not None else None,
        ))
    return DashboardConfig(
        title=config.name,
        subtitle=config.description,
        widgets=widgets,
    )

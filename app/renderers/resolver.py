"""Dispatch from a resolved (entity, view) pair to its kind's renderer.

The resolver assembles the data slice for the view (the records of the view's
entity, grouped by ``groupByField`` for kinds that need it) and leaves all
presentation to the renderer registered for ``view.kind``.
"""
import logging
from typing import Any, Dict, List, Mapping, Optional, Sequence, Union
from app.core.resolution import get_entity, view_belongs_to_entity
from app.renderers.base import DataSlice, RecordGroup, RelatedSource, RenderedView
from app.renderers.formatting import record_title
from app.renderers.registry import RendererRegistry
from app.schemas.config import CRMConfig, Entity, FieldType, View

log = logging.getLogger(__name__)

Records = List[Dict[str, Any]]


def _records(data: Union[Mapping[str, Records], Sequence[Dict[str, Any]], None], entity_id: str) -> Records:
    if data is None:
        return []
    if isinstance(data, Mapping):
        return list(data.get(entity_id) or [])
    return list(data)


def relation_lookups(
    entity: Entity,
    config: CRMConfig,
    data: Union[Mapping[str, Records], Sequence[Dict[str, Any]], None],
) -> Dict[str, Dict[str, str]]:
    """Titles of related records, per relation field, for display."""
    if not isinstance(data, Mapping):
        return {}
    lookups: Dict[str, Dict[str, str]] = {}
    for field in entity.relation_fields:
        target = get_entity(config, field.relation_target) if field.relation_target else None
        if target is None:
            continue
        lookups[field.name] = {
            str(r.get("id")): record_title(r, target)
            for r in data.get(target.id) or []
        }
    return lookups


def group_records(
    entity: Entity,
    view: View,
    records: Records,
    lookups: Dict[str, Dict[str, str]],
) -> List[RecordGroup]:
    """
    Group records by view.groupByField.

    Enum fields seed one group per option (empty groups kept) in option order;
    relation fields seed one group per target record. Values outside the seed
    get their own group in first-seen order, and records without a value land
    in a trailing group whose value is None.
    """
    field = entity.get_field(view.group_by_field) if view.group_by_field else None
    if field is None:
        return [RecordGroup(value=None, label="All", records=list(records))]

    groups: Dict[str, RecordGroup] = {}
    if field.type == FieldType.ENUM:
        for option in field.options:
            groups[option] = RecordGroup(value=option, label=option)
    elif field.type == FieldType.RELATION:
        for target_id, title in lookups.get(field.name, {}).items():
            groups[target_id] = RecordGroup(value=target_id, label=title)

    ungrouped = RecordGroup(value=None, label="No value")
    for record in records:
        value = record.get(field.name)
        if value is None or value == "":
            ungrouped.records.append(record)
            continue
        key = str(value)
        if key not in groups:
            groups[key] = RecordGroup(value=key, label=key)
        groups[key].records.append(record)

    result = list(groups.values())
    if ungrouped.records:
        result.append(ungrouped)
    return result


def related_sources(
    entity: Entity,
    config: CRMConfig,
    data: Union[Mapping[str, Records], Sequence[Dict[str, Any]], None],
) -> List[RelatedSource]:
    """Relation fields of other entities that target ``entity``, each with all of that entity's records."""
    sources: List[RelatedSource] = []
    for other in config.entities:
        if other.id == entity.id:
            continue
        for field in other.relation_fields:
            if field.relation_target == entity.id:
                records = list(data.get(other.id) or []) if isinstance(data, Mapping) else []
                sources.append(RelatedSource(entity=other, relation=field, records=records))
    return sources


class ViewResolver:
    def __init__(self, registry: Optional[RendererRegistry] = None):
        self.registry = registry or RendererRegistry.default()

    def build_slice(
        self,
        entity: Entity,
        view: View,
        config: CRMConfig,
        data: Union[Mapping[str, Records], Sequence[Dict[str, Any]], None],
        grouped: bool,
        record_id: Optional[str] = None,
        with_related: bool = False,
    ) -> DataSlice:
        records = _records(data, view.entity_id)
        lookups = relation_lookups(entity, config, data)
        groups = group_records(entity, view, records, lookups) if grouped else None
        related = related_sources(entity, config, data) if with_related else []
        return DataSlice(records=records, groups=groups, lookups=lookups, record_id=record_id, related=related)

    def resolve(
        self,
        entity: Entity,
        view: View,
        config: CRMConfig,
        data: Union[Mapping[str, Records], Sequence[Dict[str, Any]], None] = None,
        record_id: Optional[str] = None,
    ) -> RenderedView:
        """
        Render a view of an entity.

        Args:
            entity: Resolved entity
            view: Resolved view; must belong to ``entity``
            config: The config both came from
            data: Sample-data shaped mapping (entity id -> records) or the entity's records
            record_id: Record to show in a detail view

        Raises:
            ValueError: The view belongs to another entity
            UnsupportedViewKind: No renderer is registered for view.kind
        """
        if not view_belongs_to_entity(view, entity.id):
            raise ValueError(f"View '{view.id}' belongs to entity '{view.entity_id}', not '{entity.id}'")
        renderer = self.registry.get(view.kind)
        data_slice = self.build_slice(
            entity, view, config, data, renderer.requires_grouping, record_id, renderer.requires_related,
        )
        log.debug("Rendering view %s (%s) with %d records", view.id, view.kind, len(data_slice.records))
        return renderer.render(entity, view, data_slice)

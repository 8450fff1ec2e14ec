"""Grouped board renderers: kanban lanes and pipeline stages."""
from typing import Any, Dict, List, Optional
from app.renderers.base import (
    BaseViewRenderer,
    DataSlice,
    RecordGroup,
    RenderedView,
    ViewActions,
    cells,
    column,
    shown_fields,
)
from app.renderers.formatting import display_value, record_title
from app.schemas.config import Entity, Field, FieldType, View, ViewKind


class KanbanRenderer(BaseViewRenderer):
    kind = ViewKind.KANBAN.value
    requires_grouping = True
    actions = ViewActions(can_drag_drop=True)

    def render(self, entity: Entity, view: View, data: DataSlice) -> RenderedView:
        fields = [f for f in shown_fields(entity, view) if f.name != view.group_by_field]
        groups = [self._lane(entity, group, fields, data) for group in data.groups or []]
        return self._rendered(entity, view, columns=[column(f) for f in fields], groups=groups)

    def _lane(self, entity: Entity, group: RecordGroup, fields: List[Field], data: DataSlice) -> Dict[str, Any]:
        return {
            "value": group.value,
            "label": group.label,
            "count": len(group.records),
            "cards": [
                {"id": record.get("id"), "title": record_title(record, entity), "cells": cells(record, fields, data)}
                for record in group.records
            ],
        }


def amount_field(entity: Entity) -> Optional[Field]:
    """First currency field, else first number field; pipeline totals are summed over it."""
    for wanted in (FieldType.CURRENCY, FieldType.NUMBER):
        for fld in entity.fields:
            if fld.type == wanted:
                return fld
    return None


class PipelineRenderer(KanbanRenderer):
    kind = ViewKind.PIPELINE.value

    def render(self, entity: Entity, view: View, data: DataSlice) -> RenderedView:
        rendered = super().render(entity, view, data)
        amount = amount_field(entity)
        if amount is None:
            return rendered
        for lane, group in zip(rendered.groups, data.groups or []):
            total = sum(
                r[amount.name] for r in group.records
                if isinstance(r.get(amount.name), (int, float)) and not isinstance(r.get(amount.name), bool)
            )
            lane["totalField"] = amount.name
            lane["total"] = total
            lane["totalDisplay"] = display_value(total, amount)
        return rendered

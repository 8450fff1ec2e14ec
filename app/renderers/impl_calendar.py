from typing import Optional
from app.renderers.base import BaseViewRenderer, DataSlice, RenderedView
from app.renderers.formatting import parse_date, record_title
from app.schemas.config import DATE_FIELD_TYPES, Entity, Field, FieldType, View, ViewKind


def calendar_field(entity: Entity, view: View) -> Optional[Field]:
    """view.dateField when it names a date field, else the entity's first date/datetime field."""
    if view.date_field:
        fld = entity.get_field(view.date_field)
        if fld is not None and fld.type.value in DATE_FIELD_TYPES:
            return fld
    for fld in entity.fields:
        if fld.type.value in DATE_FIELD_TYPES:
            return fld
    return None


class CalendarRenderer(BaseViewRenderer):
    kind = ViewKind.CALENDAR.value

    def render(self, entity: Entity, view: View, data: DataSlice) -> RenderedView:
        fld = calendar_field(entity, view)
        if fld is None:
            return self._rendered(entity, view)
        events = []
        for record in data.records:
            start = parse_date(record.get(fld.name))
            if start is None:
                continue
            events.append({
                "id": record.get("id"),
                "title": record_title(record, entity),
                "start": start.isoformat(),
                "allDay": fld.type == FieldType.DATE,
            })
        events.sort(key=lambda e: e["start"])
        return self._rendered(
            entity,
            view,
            columns=[{"field": fld.name, "label": fld.label, "type": fld.type.value}],
            events=events,
        )

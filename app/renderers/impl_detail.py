from typing import Any, Dict, List
from app.renderers.base import (
    BaseViewRenderer,
    DataSlice,
    RelatedSource,
    RenderedView,
    ViewActions,
    column,
    shown_fields,
)
from app.renderers.formatting import display_value, record_title
from app.schemas.config import Entity, View, ViewKind

# Related records listed per source; ``total`` still counts all of them
RELATED_LIMIT = 10


def related_section(source: RelatedSource, record_id: Any) -> Dict[str, Any]:
    matches = [r for r in source.records if r.get(source.relation.name) == record_id]
    return {
        "entityId": source.entity.id,
        "field": source.relation.name,
        "label": source.entity.label_plural,
        "total": len(matches),
        "records": [
            {"id": r.get("id"), "title": record_title(r, source.entity)}
            for r in matches[:RELATED_LIMIT]
        ],
    }


class DetailRenderer(BaseViewRenderer):
    kind = ViewKind.DETAIL.value
    requires_related = True
    actions = ViewActions(can_create=False)

    def render(self, entity: Entity, view: View, data: DataSlice) -> RenderedView:
        fields = shown_fields(entity, view)
        columns = [column(f) for f in fields]
        if data.record_id is not None:
            record = next((r for r in data.records if r.get("id") == data.record_id), None)
        else:
            record = data.records[0] if data.records else None
        if record is None:
            return self._rendered(entity, view, columns=columns)
        related: List[Dict[str, Any]] = [related_section(source, record.get("id")) for source in data.related]
        return self._rendered(entity, view, columns=columns, record={
            "id": record.get("id"),
            "title": record_title(record, entity),
            "fields": [
                {
                    "field": f.name,
                    "label": f.label,
                    "value": record.get(f.name),
                    "display": display_value(record.get(f.name), f, data.lookups.get(f.name)),
                }
                for f in fields
            ],
            "related": related,
        })

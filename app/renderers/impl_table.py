from app.renderers.base import BaseViewRenderer, DataSlice, RenderedView, cells, column, shown_fields
from app.renderers.formatting import record_title
from app.schemas.config import Entity, View, ViewKind


class TableRenderer(BaseViewRenderer):
    kind = ViewKind.TABLE.value

    def render(self, entity: Entity, view: View, data: DataSlice) -> RenderedView:
        fields = shown_fields(entity, view)
        rows = [
            {"id": record.get("id"), "title": record_title(record, entity), "cells": cells(record, fields, data)}
            for record in data.records
        ]
        return self._rendered(entity, view, columns=[column(f) for f in fields], rows=rows)

from dataclasses import dataclass
from typing import Dict, List
from app.core.errors import UnsupportedViewKind
from app.renderers.base import BaseViewRenderer
from app.renderers.impl_board import KanbanRenderer, PipelineRenderer
from app.renderers.impl_calendar import CalendarRenderer
from app.renderers.impl_detail import DetailRenderer
from app.renderers.impl_table import TableRenderer


@dataclass
class RendererRegistry:
    mapping: Dict[str, BaseViewRenderer]

    def get(self, kind: str) -> BaseViewRenderer:
        renderer = self.mapping.get(kind)
        if renderer is None:
            raise UnsupportedViewKind(kind, self.kinds())
        return renderer

    def register(self, renderer: BaseViewRenderer) -> None:
        self.mapping[renderer.kind] = renderer

    def kinds(self) -> List[str]:
        return list(self.mapping)

    @staticmethod
    def default() -> "RendererRegistry":
        return RendererRegistry(mapping={
            TableRenderer.kind: TableRenderer(),
            KanbanRenderer.kind: KanbanRenderer(),
            PipelineRenderer.kind: PipelineRenderer(),
            CalendarRenderer.kind: CalendarRenderer(),
            DetailRenderer.kind: DetailRenderer(),
        })

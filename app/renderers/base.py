from dataclasses import asdict, dataclass, field
from typing import Any, Dict, List, Optional
from app.renderers.formatting import display_value
from app.schemas.config import Entity, Field, View


@dataclass
class RecordGroup:
    """Records sharing one value of the view's groupByField. ``value`` is None for the ungrouped bucket."""
    value: Optional[str]
    label: str
    records: List[Dict[str, Any]] = field(default_factory=list)


@dataclass
class RelatedSource:
    """Records of another entity whose ``relation`` field points at the viewed entity."""
    entity: Entity
    relation: Field
    records: List[Dict[str, Any]] = field(default_factory=list)


@dataclass
class DataSlice:
    records: List[Dict[str, Any]]
    groups: Optional[List[RecordGroup]] = None
    # relation field name -> {target record id: target record title}
    lookups: Dict[str, Dict[str, str]] = field(default_factory=dict)
    record_id: Optional[str] = None
    related: List[RelatedSource] = field(default_factory=list)


@dataclass
class RenderedView:
    kind: str
    entity_id: str
    view_id: str
    title: str
    columns: List[Dict[str, Any]] = field(default_factory=list)
    rows: List[Dict[str, Any]] = field(default_factory=list)
    groups: List[Dict[str, Any]] = field(default_factory=list)
    events: List[Dict[str, Any]] = field(default_factory=list)
    record: Optional[Dict[str, Any]] = None
    actions: Dict[str, bool] = field(default_factory=dict)

    def to_dict(self) -> Dict[str, Any]:
        data = asdict(self)
        data["entityId"] = data.pop("entity_id")
        data["viewId"] = data.pop("view_id")
        return data


@dataclass(frozen=True)
class ViewActions:
    can_create: bool = True
    can_edit: bool = True
    can_delete: bool = True
    can_drag_drop: bool = False

    def to_dict(self) -> Dict[str, bool]:
        return {
            "canCreate": self.can_create,
            "canEdit": self.can_edit,
            "canDelete": self.can_delete,
            "canDragDrop": self.can_drag_drop,
        }


class BaseViewRenderer:
    kind: str
    # Kinds that need DataSlice.groups built from view.groupByField
    requires_grouping: bool = False
    # Kinds that need DataSlice.related (records of other entities pointing here)
    requires_related: bool = False
    actions: ViewActions = ViewActions()

    def render(self, entity: Entity, view: View, data: DataSlice) -> RenderedView:
        raise NotImplementedError

    def _rendered(self, entity: Entity, view: View, **parts: Any) -> RenderedView:
        return RenderedView(
            kind=self.kind,
            entity_id=entity.id,
            view_id=view.id,
            title=view.label or entity.label_plural,
            actions=self.actions.to_dict(),
            **parts,
        )


def shown_fields(entity: Entity, view: View) -> List[Field]:
    """
    Fields listed in view.fieldsShown, or every entity field.

    Names without a declared field are skipped: "id" (accepted by the validator)
    and anything in a config that never went through validate_config.
    """
    if not view.fields_shown:
        return list(entity.fields)
    shown = []
    for name in view.fields_shown:
        fld = entity.get_field(name)
        if fld is not None:
            shown.append(fld)
    return shown


def column(fld: Field) -> Dict[str, Any]:
    return {"field": fld.name, "label": fld.label, "type": fld.type.value}


def cells(record: Dict[str, Any], fields: List[Field], data: DataSlice) -> Dict[str, str]:
    return {
        fld.name: display_value(record.get(fld.name), fld, data.lookups.get(fld.name))
        for fld in fields
    }

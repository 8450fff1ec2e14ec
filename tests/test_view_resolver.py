"""Tests for the view resolver and the per-kind renderers."""
import pytest
from app.core.errors import UnsupportedViewKind
from app.core.resolution import get_entity, get_view
from app.renderers.base import BaseViewRenderer, RenderedView
from app.renderers.registry import RendererRegistry
from app.renderers.resolver import ViewResolver, group_records
from app.schemas.config import View

DATA = {
    "clients": [
        {"id": "clients-1", "name": "Ada Park", "email": "ada@example.com", "status": "active"},
        {"id": "clients-2", "name": "Ben Ortiz", "email": "ben@example.com", "status": "lead"},
        {"id": "clients-3", "name": "Cy Lee", "email": "cy@example.com"},
    ],
    "cleaners": [
        {"id": "cleaners-1", "name": "Dana", "hourlyRate": 25.0, "active": True},
    ],
    "jobs": [
        {"id": "jobs-1", "title": "Deep clean", "client": "clients-1", "cleaner": "cleaners-1",
         "stage": "scheduled", "price": 180.0, "scheduledAt": "2026-03-12T09:00:00"},
        {"id": "jobs-2", "title": "Move-out", "client": "clients-2", "stage": "scheduled",
         "price": 320.5, "scheduledAt": "2026-03-04T14:30:00"},
        {"id": "jobs-3", "title": "Weekly", "client": "clients-1", "stage": "archived", "price": 90},
    ],
}


def _resolve(config, entity_id, view_id, **kwargs):
    return ViewResolver().resolve(get_entity(config, entity_id), get_view(config, view_id), config, DATA, **kwargs)


def test_table_uses_fields_shown(config):
    rendered = _resolve(config, "clients", "clients-table")
    assert rendered.kind == "table"
    assert [c["field"] for c in rendered.columns] == ["name", "email", "status"]
    assert [r["id"] for r in rendered.rows] == ["clients-1", "clients-2", "clients-3"]
    assert rendered.rows[2]["cells"]["status"] == "-"
    assert rendered.actions["canCreate"] is True


def test_table_shows_relation_titles_and_formatted_values(config):
    rendered = _resolve(config, "jobs", "jobs-table")
    first = rendered.rows[0]["cells"]
    assert first["client"] == "Ada Park"
    assert first["cleaner"] == "Dana"
    assert first["price"] == "$180.00"
    assert first["scheduledAt"] == "Mar 12, 2026 9:00 AM"
    assert rendered.rows[1]["cells"]["cleaner"] == "-"


def test_kanban_lanes_in_option_order(config):
    """Every option gets a lane, empty ones included; records without a value trail."""
    rendered = _resolve(config, "clients", "clients-board")
    lanes = [(g["value"], g["count"]) for g in rendered.groups]
    assert lanes == [("lead", 1), ("active", 1), ("inactive", 0), (None, 1)]
    assert rendered.groups[0]["cards"][0]["title"] == "Ben Ortiz"
    assert "status" not in [c["field"] for c in rendered.columns]
    assert rendered.actions["canDragDrop"] is True


def test_pipeline_lanes_carry_totals(config):
    rendered = _resolve(config, "jobs", "jobs-pipeline")
    lanes = {g["value"]: g for g in rendered.groups}
    assert list(lanes) == ["quoted", "scheduled", "completed", "invoiced", "archived"]
    assert lanes["scheduled"]["total"] == 500.5
    assert lanes["scheduled"]["totalDisplay"] == "$500.50"
    assert lanes["quoted"]["total"] == 0
    assert lanes["archived"]["count"] == 1


def test_calendar_events_sorted_and_undated_skipped(config):
    rendered = _resolve(config, "jobs", "jobs-calendar")
    assert [(e["id"], e["start"]) for e in rendered.events] == [
        ("jobs-2", "2026-03-04T14:30:00"),
        ("jobs-1", "2026-03-12T09:00:00"),
    ]
    assert rendered.events[0]["allDay"] is False


def test_detail_shows_requested_record(config):
    rendered = _resolve(config, "jobs", "jobs-detail", record_id="jobs-2")
    assert rendered.record["id"] == "jobs-2"
    assert rendered.record["title"] == "Move-out"
    fields = {f["field"]: f for f in rendered.record["fields"]}
    assert fields["client"]["display"] == "Ben Ortiz"
    assert fields["client"]["value"] == "clients-2"
    assert rendered.actions["canCreate"] is False


def test_detail_defaults_to_first_record_and_handles_unknown_id(config):
    assert _resolve(config, "jobs", "jobs-detail").record["id"] == "jobs-1"
    assert _resolve(config, "jobs", "jobs-detail", record_id="jobs-99").record is None


def test_group_by_relation_seeds_target_records(config):
    entity = get_entity(config, "jobs")
    view = View(id="jobs-by-client", entity_id="jobs", kind="kanban", group_by_field="client")
    lookups = {"client": {"clients-1": "Ada Park", "clients-2": "Ben Ortiz", "clients-3": "Cy Lee"}}
    groups = group_records(entity, view, DATA["jobs"], lookups)
    assert [(g.value, g.label, len(g.records)) for g in groups] == [
        ("clients-1", "Ada Park", 2),
        ("clients-2", "Ben Ortiz", 1),
        ("clients-3", "Cy Lee", 0),
    ]


def test_unsupported_kind_raises(config):
    entity = get_entity(config, "jobs")
    view = View(id="jobs-gantt", entity_id="jobs", kind="gantt")
    with pytest.raises(UnsupportedViewKind) as exc_info:
        ViewResolver().resolve(entity, view, config, DATA)
    assert exc_info.value.kind == "gantt"
    assert "table" in exc_info.value.supported


def test_view_of_another_entity_is_rejected(config):
    with pytest.raises(ValueError):
        ViewResolver().resolve(get_entity(config, "clients"), get_view(config, "jobs-table"), config, DATA)


def test_registered_renderer_handles_new_kind(config):
    class GanttRenderer(BaseViewRenderer):
        kind = "gantt"

        def render(self, entity, view, data):
            return self._rendered(entity, view, rows=[{"id": r["id"]} for r in data.records])

    registry = RendererRegistry.default()
    registry.register(GanttRenderer())
    view = View(id="jobs-gantt", entity_id="jobs", kind="gantt", label="Timeline")
    rendered = ViewResolver(registry).resolve(get_entity(config, "jobs"), view, config, DATA)
    assert isinstance(rendered, RenderedView)
    assert rendered.title == "Timeline"
    assert len(rendered.rows) == 3


def test_rendered_view_serializes_camel_case(config):
    data = _resolve(config, "clients", "clients-table").to_dict()
    assert data["entityId"] == "clients"
    assert data["viewId"] == "clients-table"
    assert data["title"] == "Clients"


def test_detail_lists_records_pointing_at_it(config):
    """A client's detail shows the jobs whose client field references that client."""
    view = View(id="clients-detail", entity_id="clients", kind="detail")
    rendered = ViewResolver().resolve(get_entity(config, "clients"), view, config, DATA, record_id="clients-1")
    assert rendered.record["related"] == [{
        "entityId": "jobs",
        "field": "client",
        "label": "Jobs",
        "total": 2,
        "records": [{"id": "jobs-1", "title": "Deep clean"}, {"id": "jobs-3", "title": "Weekly"}],
    }]

    lonely = ViewResolver().resolve(get_entity(config, "clients"), view, config, DATA, record_id="clients-3")
    assert lonely.record["related"][0]["total"] == 0
    assert lonely.record["related"][0]["records"] == []


def test_detail_related_list_is_capped(config):
    jobs = [{"id": f"jobs-{n}", "title": f"Job {n}", "cleaner": "cleaners-1"} for n in range(1, 13)]
    data = {**DATA, "jobs": jobs}
    view = View(id="cleaners-detail", entity_id="cleaners", kind="detail")
    rendered = ViewResolver().resolve(get_entity(config, "cleaners"), view, config, data)
    section = rendered.record["related"][0]
    assert section["field"] == "cleaner"
    assert section["total"] == 12
    assert len(section["records"]) == 10


def test_entity_without_inbound_relations_has_no_related_sections(config):
    assert _resolve(config, "jobs", "jobs-detail").record["related"] == []


def test_table_skips_id_in_fields_shown(config):
    view = View(id="clients-ids", entity_id="clients", kind="table", fields_shown=["id", "name"])
    rendered = ViewResolver().resolve(get_entity(config, "clients"), view, config, DATA)
    assert [c["field"] for c in rendered.columns] == ["name"]

"""Tests for config lookups."""
from app.core.resolution import (
    get_default_view,
    get_entity,
    get_view,
    get_views_for_entity,
    resolve_entity_view,
    view_belongs_to_entity,
)
from app.schemas.config import CRMConfig


def test_get_entity_and_view(config):
    assert get_entity(config, "jobs").label == "Job"
    assert get_entity(config, "invoices") is None
    assert get_view(config, "jobs-calendar").kind == "calendar"
    assert get_view(config, "jobs-gantt") is None


def test_views_for_entity_in_declaration_order(config):
    assert [v.id for v in get_views_for_entity(config, "jobs")] == [
        "jobs-pipeline", "jobs-calendar", "jobs-table", "jobs-detail",
    ]
    assert get_views_for_entity(config, "invoices") == []


def test_default_view_prefers_explicit_default(config):
    assert get_default_view(config, "jobs").id == "jobs-pipeline"
    assert get_default_view(config, "clients").id == "clients-table"


def test_default_view_falls_back_to_first_declared(config):
    """cleaners has one view and none marked default."""
    assert get_default_view(config, "cleaners").id == "cleaners-table"


def test_default_view_without_views_is_none(raw_config):
    raw_config["entities"].append({"id": "invoices", "fields": [{"name": "total", "type": "currency"}]})
    config = CRMConfig.model_validate(raw_config)
    assert get_default_view(config, "invoices") is None
    assert resolve_entity_view(config, "invoices") is None


def test_view_belongs_to_entity(config):
    view = get_view(config, "jobs-table")
    assert view_belongs_to_entity(view, "jobs")
    assert not view_belongs_to_entity(view, "clients")


def test_resolve_entity_view(config):
    entity, view = resolve_entity_view(config, "jobs")
    assert (entity.id, view.id) == ("jobs", "jobs-pipeline")
    entity, view = resolve_entity_view(config, "jobs", "jobs-calendar")
    assert view.kind == "calendar"
    assert resolve_entity_view(config, "clients", "jobs-calendar") is None
    assert resolve_entity_view(config, "ghosts") is None
    assert resolve_entity_view(config, "jobs", "missing") is None

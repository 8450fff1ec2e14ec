"""Lookups over an already-loaded CRMConfig.

All functions are pure; unknown ids resolve to ``None``.
"""
from typing import List, Optional, Tuple
from app.schemas.config import CRMConfig, Entity, View


def get_entity(config: CRMConfig, entity_id: str) -> Optional[Entity]:
    """Get an entity by its ID from the configuration."""
    for entity in config.entities:
        if entity.id == entity_id:
            return entity
    return None


def get_view(config: CRMConfig, view_id: str) -> Optional[View]:
    """Get a view by its ID from the configuration."""
    for view in config.views:
        if view.id == view_id:
            return view
    return None


def get_views_for_entity(config: CRMConfig, entity_id: str) -> List[View]:
    """Get all views for a specific entity, in declaration order."""
    return [v for v in config.views if v.entity_id == entity_id]


def get_default_view(config: CRMConfig, entity_id: str) -> Optional[View]:
    """
    Get the default view for an entity.

    The view marked ``is_default`` wins; otherwise the first view declared for
    the entity. Entities without views have no default.
    """
    entity_views = get_views_for_entity(config, entity_id)
    for view in entity_views:
        if view.is_default:
            return view
    return entity_views[0] if entity_views else None


def view_belongs_to_entity(view: View, entity_id: str) -> bool:
    return view.entity_id == entity_id


def resolve_entity_view(
    config: CRMConfig,
    entity_id: str,
    view_id: Optional[str] = None,
) -> Optional[Tuple[Entity, View]]:
    """
    Resolve the (entity, view) pair for a CRM page.

    Without ``view_id`` the entity's default view is used. A view that belongs
    to another entity does not resolve.
    """
    entity = get_entity(config, entity_id)
    if entity is None:
        return None
    view = get_view(config, view_id) if view_id else get_default_view(config, entity_id)
    if view is None or not view_belongs_to_entity(view, entity_id):
        return None
    return entity, view

"""Sample-data synthesis for a validated CRMConfig.

Entities are generated in dependency order so that relation values point at
records that already exist. Relations that cannot be satisfied at generation
time (self references and cycles) are back-filled once every entity has its
records.
"""
import logging
import random
from datetime import date
from typing import Any, Dict, List, Optional, Tuple
from app.core.config import settings
from app.generators.sample_data.values import SERVER_MANAGED_FIELDS, field_value
from app.schemas.config import CRMConfig, FieldType
from app.schemas.generation import SampleData

log = logging.getLogger(__name__)


def generation_order(config: CRMConfig) -> List[str]:
    """
    Order entity ids so relation targets come before the entities pointing at them.

    Ties keep declaration order. When no entity is ready, the first remaining
    entity (in declaration order) that sits on a relation cycle is taken next,
    which breaks that cycle; entities that merely depend on a cycle wait for it.
    """
    remaining = list(config.entity_ids)
    deps = {
        entity.id: {f.relation_target for f in entity.relation_fields if f.relation_target and f.relation_target != entity.id}
        for entity in config.entities
    }
    order: List[str] = []
    done: set = set()
    while remaining:
        ready = next((eid for eid in remaining if deps[eid] <= done), None)
        if ready is None:
            ready = next((eid for eid in remaining if _on_cycle(eid, deps, remaining)), remaining[0])
            log.info("Breaking relation cycle at entity %s", ready)
        order.append(ready)
        done.add(ready)
        remaining.remove(ready)
    return order


def _on_cycle(entity_id: str, deps: Dict[str, set], remaining: List[str]) -> bool:
    """True when entity_id can reach itself through dependencies among the remaining entities."""
    pending = set(remaining)
    stack = [d for d in deps[entity_id] if d in pending]
    seen: set = set()
    while stack:
        current = stack.pop()
        if current == entity_id:
            return True
        if current in seen:
            continue
        seen.add(current)
        stack.extend(d for d in deps.get(current, ()) if d in pending)
    return False


def record_id(entity_id: str, n: int) -> str:
    return f"{entity_id}-{n}"


def synthesize_sample_data(
    config: CRMConfig,
    count_per_entity: Optional[int] = None,
    seed: Optional[int] = None,
    today: Optional[date] = None,
) -> SampleData:
    """
    Generate ``count_per_entity`` records for every entity.

    Args:
        config: A config that already passed validation
        count_per_entity: Records per entity; defaults to settings.sample_records_per_entity
        seed: Seed for reproducible output
        today: Anchor for synthesized dates; defaults to the current date

    Returns:
        Mapping of entity id to its records, keyed in declaration order

    Raises:
        ValueError: If the count is negative
    """
    count = settings.sample_records_per_entity if count_per_entity is None else count_per_entity
    if count < 0:
        raise ValueError("count_per_entity must be >= 0")

    rng = random.Random(seed)
    today = today or date.today()
    entities = {e.id: e for e in config.entities}
    data: Dict[str, List[Dict[str, Any]]] = {}
    deferred: List[Tuple[str, str, str]] = []  # (entity id, field name, target id)

    for entity_id in generation_order(config):
        entity = entities[entity_id]
        records = []
        for n in range(1, count + 1):
            record: Dict[str, Any] = {"id": record_id(entity_id, n)}
            for field in entity.fields:
                if field.name in SERVER_MANAGED_FIELDS:
                    continue
                if field.type == FieldType.RELATION:
                    continue
                value = field_value(field, entity, n, rng, today)
                if value is not None:
                    record[field.name] = value
            records.append(record)
        data[entity_id] = records

        for field in entity.relation_fields:
            if field.name in SERVER_MANAGED_FIELDS:
                continue
            target = field.relation_target
            if target in data and target != entity_id:
                _fill_relation(records, field.name, data[target], rng)
            else:
                deferred.append((entity_id, field.name, target))

    for entity_id, field_name, target in deferred:
        _fill_relation(data[entity_id], field_name, data.get(target, []), rng, self_target=target == entity_id)

    log.info(
        "Synthesized sample data entities=%d records_per_entity=%d backfilled_relations=%d",
        len(data), count, len(deferred),
    )
    return {entity_id: data[entity_id] for entity_id in config.entity_ids}


def _fill_relation(
    records: List[Dict[str, Any]],
    field_name: str,
    targets: List[Dict[str, Any]],
    rng: random.Random,
    self_target: bool = False,
) -> None:
    # A target without records leaves the relation absent
    if not targets:
        return
    for record in records:
        choices = targets
        if self_target and len(targets) > 1:
            choices = [t for t in targets if t["id"] != record["id"]]
        record[field_name] = rng.choice(choices)["id"]

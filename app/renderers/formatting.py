"""Display formatting of record values."""
from datetime import date, datetime
from typing import Any, Dict, Mapping, Optional
from app.schemas.config import Entity, Field, FieldType

EMPTY = "-"


def parse_date(value: Any) -> Optional[datetime]:
    """Parse an ISO date or datetime value; None when it is not one."""
    if isinstance(value, datetime):
        return value
    if isinstance(value, date):
        return datetime(value.year, value.month, value.day)
    if not isinstance(value, str) or not value:
        return None
    try:
        return datetime.fromisoformat(value.replace("Z", "+00:00"))
    except ValueError:
        return None


def display_value(value: Any, field: Field, lookups: Optional[Mapping[str, str]] = None) -> str:
    if value is None or value == "":
        return EMPTY
    if field.type == FieldType.CURRENCY and isinstance(value, (int, float)):
        return f"${value:,.2f}"
    if field.type == FieldType.PERCENTAGE:
        return f"{value}%"
    if field.type == FieldType.BOOLEAN:
        return "Yes" if value else "No"
    if field.type in (FieldType.DATE, FieldType.DATETIME):
        parsed = parse_date(value)
        if parsed is None:
            return str(value)
        if field.type == FieldType.DATE:
            return f"{parsed:%b} {parsed.day}, {parsed.year}"
        hour = parsed.hour % 12 or 12
        return f"{parsed:%b} {parsed.day}, {parsed.year} {hour}:{parsed:%M} {parsed:%p}"
    if field.type == FieldType.RELATION and lookups:
        return lookups.get(str(value), str(value))
    return str(value)


def title_field(entity: Entity) -> Optional[str]:
    """The entity's titleField, else its first text-like field, else its first field."""
    if entity.title_field:
        return entity.title_field
    for field in entity.fields:
        if field.type in (FieldType.TEXT, FieldType.EMAIL):
            return field.name
    return entity.fields[0].name if entity.fields else None


def record_title(record: Dict[str, Any], entity: Entity) -> str:
    name = title_field(entity)
    value = record.get(name) if name else None
    return str(value) if value not in (None, "") else "Untitled"

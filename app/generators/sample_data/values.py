"""Plausible field values for sample records, chosen by field type and name."""
import random
from datetime import date, datetime, time, timedelta
from typing import Any, Optional
from app.core.naming import slugify, to_snake_case
from app.schemas.config import Entity, Field, FieldType

# Fields the data layer manages itself; never synthesized
SERVER_MANAGED_FIELDS = {"id", "createdAt", "created_at", "updatedAt", "updated_at", "deletedAt", "deleted_at"}

FIRST_NAMES = [
    "Olivia", "Liam", "Emma", "Noah", "Ava", "Mateo", "Sophia", "Lucas", "Mia", "Ethan",
    "Amara", "Kenji", "Priya", "Diego", "Chloe", "Samuel", "Zara", "Omar", "Grace", "Leo",
]
LAST_NAMES = [
    "Johnson", "Garcia", "Nguyen", "Patel", "Smith", "Kowalski", "Okafor", "Rossi", "Mueller", "Tanaka",
    "Brown", "Martinez", "Lee", "Dubois", "Wilson", "Silva", "Cohen", "Walker", "Khan", "Murphy",
]
COMPANY_WORDS = [
    "Summit", "Harbor", "Bright", "Evergreen", "Northwind", "Bluebird", "Cedar", "Pioneer", "Atlas", "Keystone",
]
COMPANY_SUFFIXES = ["LLC", "Inc.", "Group", "Partners", "Co.", "Studio"]
STREETS = ["Maple Ave", "Oak St", "Pine Rd", "Cedar Ln", "Elm St", "Lakeview Dr", "Hillcrest Blvd", "Main St"]
CITIES = ["Austin", "Denver", "Portland", "Raleigh", "Madison", "Boise", "Tucson", "Columbus"]
WORDS = [
    "follow", "up", "quarterly", "review", "initial", "consultation", "deep", "clean", "estimate", "visit",
    "renewal", "onboarding", "priority", "standard", "weekly", "service", "request", "proposal", "site", "check",
]
SENTENCES = [
    "Customer asked for a call back before the next visit.",
    "Prefers morning appointments and email reminders.",
    "Access code is at the front desk.",
    "Discussed pricing options and sent a written estimate.",
    "Needs extra time on the first visit.",
    "Referred by an existing client.",
]

# Entity ids whose "name" fields hold a person's name
PERSON_ENTITY_WORDS = {
    "client", "customer", "contact", "lead", "employee", "staff", "member", "agent", "user", "patient",
    "student", "candidate", "owner", "tenant", "volunteer", "technician", "cleaner", "person", "people", "guest",
}
COMPANY_ENTITY_WORDS = {"company", "companies", "account", "organization", "vendor", "supplier", "partner", "business"}


def _words(name: str) -> set:
    return set(to_snake_case(name).split("_"))


def _matches(name: str, *keywords: str) -> bool:
    words = _words(name)
    return any(k in words for k in keywords)


def _person(rng: random.Random) -> str:
    return f"{rng.choice(FIRST_NAMES)} {rng.choice(LAST_NAMES)}"


def _company(rng: random.Random) -> str:
    return f"{rng.choice(COMPANY_WORDS)} {rng.choice(COMPANY_SUFFIXES)}"


def _phrase(rng: random.Random, count: int = 2) -> str:
    return " ".join(rng.sample(WORDS, count)).capitalize()


def _entity_kind(entity: Entity) -> Optional[str]:
    words = _words(entity.id) | _words(entity.label)
    singular = {w[:-1] for w in words if w.endswith("s")}
    words |= singular
    if words & PERSON_ENTITY_WORDS:
        return "person"
    if words & COMPANY_ENTITY_WORDS:
        return "company"
    return None


def text_value(field: Field, entity: Entity, index: int, rng: random.Random) -> str:
    name = field.name
    if _matches(name, "first", "firstname"):
        return rng.choice(FIRST_NAMES)
    if _matches(name, "last", "lastname", "surname"):
        return rng.choice(LAST_NAMES)
    if _matches(name, "company", "organization", "employer", "business"):
        return _company(rng)
    if _matches(name, "address", "street"):
        return f"{rng.randint(10, 9999)} {rng.choice(STREETS)}"
    if _matches(name, "city", "location"):
        return rng.choice(CITIES)
    if _matches(name, "zip", "postal", "postcode"):
        return f"{rng.randint(10000, 99999)}"
    if _matches(name, "name", "fullname", "contact"):
        kind = _entity_kind(entity)
        if kind == "person":
            return _person(rng)
        if kind == "company":
            return _company(rng)
        return f"{entity.label} {index}"
    if _matches(name, "title", "subject", "summary", "service"):
        return _phrase(rng)
    if _matches(name, "code", "reference", "number", "sku"):
        return f"{slugify(entity.label)[:3].upper()}-{1000 + index}"
    return f"{field.label} {index}"


def number_value(field: Field, rng: random.Random) -> Any:
    name = field.name
    if field.type == FieldType.CURRENCY:
        return round(rng.uniform(50, 5000), 2)
    if field.type == FieldType.PERCENTAGE:
        return rng.randint(0, 100)
    if _matches(name, "age"):
        return rng.randint(18, 80)
    if _matches(name, "rating", "score", "stars"):
        return rng.randint(1, 5)
    if _matches(name, "year"):
        return rng.randint(2015, 2026)
    if _matches(name, "hours", "duration", "minutes"):
        return rng.choice([1, 1.5, 2, 2.5, 3, 4])
    if _matches(name, "quantity", "qty", "count", "rooms", "bedrooms", "bathrooms", "units", "size"):
        return rng.randint(1, 12)
    return rng.randint(1, 1000)


def date_value(field: Field, rng: random.Random, today: date) -> str:
    day = today + timedelta(days=rng.randint(-180, 90))
    if field.type == FieldType.DATETIME:
        moment = datetime.combine(day, time(hour=rng.randint(8, 17), minute=rng.choice([0, 15, 30, 45])))
        return moment.isoformat()
    return day.isoformat()


def field_value(field: Field, entity: Entity, index: int, rng: random.Random, today: date) -> Any:
    """
    Synthesize one value for a non-relation field.

    Returns None only for an enum without options.
    """
    field_type = field.type
    if field_type == FieldType.EMAIL:
        local = ".".join(slugify(part) for part in _person(rng).split())
        return f"{local}{index}@example.com"
    if field_type == FieldType.PHONE:
        return f"({rng.randint(200, 989)}) 555-{rng.randint(1000, 9999)}"
    if field_type == FieldType.URL:
        return f"https://www.{slugify(_company(rng).split()[0])}{index}.example.com"
    if field_type in (FieldType.NUMBER, FieldType.CURRENCY, FieldType.PERCENTAGE):
        return number_value(field, rng)
    if field_type == FieldType.BOOLEAN:
        return rng.random() < 0.5
    if field_type in (FieldType.DATE, FieldType.DATETIME):
        return date_value(field, rng, today)
    if field_type == FieldType.ENUM:
        return rng.choice(field.options) if field.options else None
    if field_type == FieldType.TEXTAREA:
        return rng.choice(SENTENCES)
    return text_value(field, entity, index, rng)

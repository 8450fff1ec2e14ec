import asyncio
import copy
from typing import Any, Dict, List
import pytest
from app.llm.client import GenerationRequest
from app.schemas.config import CRMConfig

CLEANING_CONFIG = {
    "version": "1.0.0",
    "name": "Sparkle Home Cleaning CRM",
    "description": "Clients, cleaning jobs and the cleaners who do them",
    "entities": [
        {
            "id": "clients",
            "label": "Client",
            "labelPlural": "Clients",
            "titleField": "name",
            "fields": [
                {"name": "name", "type": "text", "required": True},
                {"name": "email", "type": "email", "required": True},
                {"name": "phone", "type": "phone"},
                {"name": "address", "type": "text"},
                {"name": "status", "type": "enum", "options": ["lead", "active", "inactive"]},
            ],
        },
        {
            "id": "cleaners",
            "label": "Cleaner",
            "labelPlural": "Cleaners",
            "titleField": "name",
            "fields": [
                {"name": "name", "type": "text", "required": True},
                {"name": "hourlyRate", "type": "currency"},
                {"name": "active", "type": "boolean"},
            ],
        },
        {
            "id": "jobs",
            "label": "Job",
            "labelPlural": "Jobs",
            "titleField": "title",
            "fields": [
                {"name": "title", "type": "text", "required": True},
                {"name": "client", "type": "relation", "relationTarget": "clients", "required": True},
                {"name": "cleaner", "type": "relation", "relationTarget": "cleaners"},
                {"name": "stage", "type": "enum", "options": ["quoted", "scheduled", "completed", "invoiced"]},
                {"name": "price", "type": "currency"},
                {"name": "scheduledAt", "type": "datetime"},
                {"name": "notes", "type": "textarea"},
            ],
        },
    ],
    "views": [
        {"id": "clients-table", "entityId": "clients", "kind": "table", "isDefault": True,
         "fieldsShown": ["name", "email", "status"]},
        {"id": "clients-board", "entityId": "clients", "kind": "kanban", "groupByField": "status"},
        {"id": "cleaners-table", "entityId": "cleaners", "kind": "table"},
        {"id": "jobs-pipeline", "entityId": "jobs", "kind": "pipeline", "groupByField": "stage", "isDefault": True},
        {"id": "jobs-calendar", "entityId": "jobs", "kind": "calendar", "dateField": "scheduledAt"},
        {"id": "jobs-table", "entityId": "jobs", "kind": "table"},
        {"id": "jobs-detail", "entityId": "jobs", "kind": "detail"},
    ],
    "navigation": [
        {"id": "nav-clients", "label": "Clients", "entityId": "clients", "viewId": "clients-table"},
        {"id": "nav-cleaners", "label": "Cleaners", "entityId": "cleaners"},
        {"id": "nav-jobs", "label": "Jobs", "entityId": "jobs", "viewId": "jobs-pipeline"},
    ],
}


@pytest.fixture
def raw_config():
    return copy.deepcopy(CLEANING_CONFIG)


@pytest.fixture
def config(raw_config):
    return CRMConfig.model_validate(raw_config)


class FakeClient:
    """Replays queued responses; an Exception in the queue is raised instead."""

    model = "fake-model"
    temperature = 0.0

    def __init__(self, *responses: Any, delay: float = 0.0):
        self.responses = list(responses)
        self.requests: List[GenerationRequest] = []
        self.delay = delay

    async def generate_structured(self, request: GenerationRequest) -> Dict[str, Any]:
        self.requests.append(request)
        if self.delay:
            await asyncio.sleep(self.delay)
        response = self.responses.pop(0)
        if isinstance(response, Exception):
            raise response
        return copy.deepcopy(response)

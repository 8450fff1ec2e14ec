"""Script to generate openapi.yaml for an example config and save it for inspection."""
from pathlib import Path
from app.core.validation import validate_config
from app.generators.dashboard_gen.openapi import dump_openapi_yaml, render_openapi
from app.generators.dashboard_gen.resources import derive_resources
from app.schemas.config import CRMConfig

config = CRMConfig.model_validate({
    "name": "Bright Homes Cleaning",
    "entities": [
        {
            "id": "clients",
            "label": "Client",
            "titleField": "name",
            "fields": [
                {"name": "name", "type": "text", "required": True},
                {"name": "email", "type": "email"},
                {"name": "address", "type": "text"},
            ],
        },
        {
            "id": "jobs",
            "label": "Job",
            "titleField": "title",
            "fields": [
                {"name": "title", "type": "text", "required": True},
                {"name": "client", "type": "relation", "relationTarget": "clients", "required": True},
                {"name": "status", "type": "enum", "options": ["scheduled", "in_progress", "done"]},
                {"name": "price", "type": "currency"},
                {"name": "scheduledAt", "type": "datetime"},
            ],
        },
    ],
    "views": [
        {"id": "clients-table", "entityId": "clients", "kind": "table", "isDefault": True},
        {"id": "jobs-board", "entityId": "jobs", "kind": "kanban", "groupByField": "status", "isDefault": True},
    ],
})

result = validate_config(config)
if not result.valid:
    raise SystemExit("\n".join(str(e) for e in result.errors))

output_dir = Path(__file__).parent.parent / "test_output"
output_dir.mkdir(exist_ok=True)
openapi_path = output_dir / "openapi.yaml"

resources = derive_resources(config)
openapi_path.write_text(dump_openapi_yaml(render_openapi(config, resources)), encoding="utf-8")

print("=" * 60)
print("OPENAPI.YAML GENERATION")
print("=" * 60)
print(f"Resources: {', '.join(r.name for r in resources)}")
print(f"Generated file location:")
print(f"  {openapi_path.absolute()}")
print(f"File size: {openapi_path.stat().st_size} bytes")

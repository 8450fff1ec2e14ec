"""
Run full CRM generation against the configured model and write the result to disk.

Usage:
    ANTHROPIC_API_KEY=... python scripts/run_full_generation.py "A CRM for my cleaning business ..." [industry]
"""
import asyncio
import json
import sys
import uuid
from pathlib import Path
from app.core.errors import GenerationError, GenerationInvalid
from app.core.logging import configure_logging
from app.generators.config_gen.generator import ConfigGenerator
from app.schemas.generation import GenerationHints


async def main() -> int:
    if len(sys.argv) < 2:
        print(__doc__)
        return 2
    prompt = sys.argv[1]
    hints = GenerationHints(industry=sys.argv[2] if len(sys.argv) > 2 else None)
    project_id = str(uuid.uuid4())

    try:
        result = await ConfigGenerator().generate_full(prompt, project_id, hints)
    except GenerationInvalid as e:
        print(f"FAILED: {e.message}")
        for error in e.errors:
            print(f"  - {error}")
        return 1
    except GenerationError as e:
        print(f"FAILED ({e.code}): {e.message}")
        return 1

    output_dir = Path(__file__).parent.parent / "test_output"
    output_dir.mkdir(exist_ok=True)
    output_path = output_dir / f"generation-{project_id}.json"
    output_path.write_text(json.dumps(result.to_json_dict(), indent=2), encoding="utf-8")

    config = result.config
    print(f"Generated '{config.name}': {len(config.entities)} entities, {len(config.views)} views")
    print(f"Attempts: {result.meta['attempts']}")
    print(f"Written to {output_path.absolute()}")
    return 0


if __name__ == "__main__":
    configure_logging()
    sys.exit(asyncio.run(main()))

from typing import Any, Dict
from fastapi import APIRouter, Body, Depends, HTTPException
from app.api.errors import generation_http_error
from app.core.errors import GenerationError
from app.core.validation import validate_config
from app.generators.config_gen.generator import ConfigGenerator, check_candidate
from app.schemas.projects import GenerateConfigRequest, ModifyConfigRequest, ValidationResponse

router = APIRouter(prefix="/configs")


def get_generator() -> ConfigGenerator:
    return ConfigGenerator()


@router.post("/validate", response_model=ValidationResponse)
def validate(config: Any = Body(...)):
    return validate_config(config).to_dict()


@router.post("/generate")
async def generate(req: GenerateConfigRequest, generator: ConfigGenerator = Depends(get_generator)) -> Dict[str, Any]:
    """Config-only generation, answered inline."""
    try:
        config = await generator.generate(req.prompt, req.hints)
    except GenerationError as e:
        raise generation_http_error(e)
    return config.to_json_dict()


@router.post("/modify")
async def modify(req: ModifyConfigRequest, generator: ConfigGenerator = Depends(get_generator)) -> Dict[str, Any]:
    existing, errors = check_candidate(req.config)
    if existing is None:
        raise HTTPException(
            status_code=422,
            detail={"code": "INVALID_CONFIG", "valid": False, "errors": [e.to_dict() for e in errors]},
        )
    try:
        config = await generator.modify(existing, req.instruction)
    except GenerationError as e:
        raise generation_http_error(e)
    return config.to_json_dict()

from __future__ import annotations
import asyncio
import logging
from dataclasses import replace
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional, Tuple
from pydantic import ValidationError
from app.core.config import settings
from app.core.errors import GenerationError, GenerationInvalid, GenerationTimeout, GenerationUpstreamFailure
from app.core.validation import ValidationIssue, validate_config
from app.core.workflow import AttemptRecord, GenerationStage
from app.generators.config_gen.normalize import normalize_config
from app.generators.dashboard_gen.generator import derive_dashboard
from app.generators.dashboard_gen.resources import derive_resources
from app.generators.sample_data.generator import synthesize_sample_data
from app.llm.client import AnthropicStructuredClient, GenerationRequest, StructuredGenerator
from app.schemas.config import CRMConfig
from app.schemas.generation import GenerationHints, GenerationResult

log = logging.getLogger(__name__)

# Initial attempt plus one repair
MAX_ATTEMPTS = 2


def _loc_to_path(loc: Tuple[Any, ...]) -> str:
    path = ""
    for part in loc:
        if isinstance(part, int):
            path += f"[{part}]"
        else:
            path += f".{part}" if path else str(part)
    return path or "$"


def check_candidate(candidate: Any) -> Tuple[Optional[CRMConfig], List[ValidationIssue]]:
    """
    Validate a normalized candidate and build the typed config from it.

    Returns:
        ``(config, [])`` when the candidate is clean, otherwise ``(None, errors)``
    """
    result = validate_config(candidate)
    if not result.valid:
        return None, result.errors
    try:
        config = CRMConfig.model_validate(candidate)
    except ValidationError as e:
        return None, [
            ValidationIssue(_loc_to_path(tuple(err["loc"])), err["msg"])
            for err in e.errors()
        ]
    # The typed model fills defaults; it must still pass on its own
    result = validate_config(config)
    if not result.valid:
        return None, result.errors
    return config, []


class ConfigGenerator:
    """
    Drives the language model to a validated CRMConfig.

    Each call runs: request -> normalize -> validate, then at most one repair
    request carrying the error list. Every call is bounded by one deadline.
    """

    def __init__(
        self,
        client: Optional[StructuredGenerator] = None,
        timeout: Optional[float] = None,
    ):
        self.client = client if client is not None else AnthropicStructuredClient()
        self.timeout = timeout if timeout is not None else settings.generation_timeout_seconds

    async def generate(
        self,
        prompt: str,
        hints: Optional[GenerationHints] = None,
        project_id: str = "-",
        timeout: Optional[float] = None,
    ) -> CRMConfig:
        """Config-only mode."""
        request = GenerationRequest(prompt=prompt, hints=hints or GenerationHints())
        config, _ = await self._run(request, project_id, timeout)
        return config

    async def modify(
        self,
        existing_config: CRMConfig,
        instruction: str,
        project_id: str = "-",
        timeout: Optional[float] = None,
    ) -> CRMConfig:
        """Apply a natural-language change to an existing config; the result is a new validated config."""
        request = GenerationRequest(prompt=instruction, existing_config=existing_config.to_json_dict())
        config, _ = await self._run(request, project_id, timeout)
        return config

    async def generate_full(
        self,
        prompt: str,
        project_id: str,
        hints: Optional[GenerationHints] = None,
        count_per_entity: Optional[int] = None,
        seed: Optional[int] = None,
        timeout: Optional[float] = None,
    ) -> GenerationResult:
        """
        Full mode: a validated config plus sample data, dashboard and resources.

        Args:
            prompt: Business description (length is enforced by callers)
            project_id: Id the result will be stored under
            hints: Optional industry / primary use case
            count_per_entity: Sample records per entity
            seed: Seed for sample data
            timeout: Overrides the configured generation timeout

        Returns:
            GenerationResult with provenance metadata

        Raises:
            GenerationInvalid: No valid config after the repair attempt
            GenerationTimeout: The deadline passed
            GenerationUpstreamFailure: The model failed or returned no JSON
        """
        hints = hints or GenerationHints()
        request = GenerationRequest(prompt=prompt, hints=hints)
        config, history = await self._run(request, project_id, timeout)

        log.info("Synthesizing sample data", extra={"project_id": project_id, "stage": GenerationStage.SYNTHESIZE_DATA.value})
        sample_data = synthesize_sample_data(config, count_per_entity, seed)
        log.info("Deriving dashboard", extra={"project_id": project_id, "stage": GenerationStage.DERIVE_DASHBOARD.value})
        dashboard = derive_dashboard(config, sample_data)
        log.info("Deriving resources", extra={"project_id": project_id, "stage": GenerationStage.DERIVE_RESOURCES.value})
        resources = derive_resources(config)

        meta: Dict[str, Any] = {
            "projectId": project_id,
            "prompt": prompt,
            "hints": hints.to_json_dict(),
            "generatedAt": datetime.now(timezone.utc).isoformat(),
            "attempts": len(history),
            "history": [
                {"stage": a.stage.value, "ok": a.ok, "errorCount": a.error_count}
                for a in history
            ],
            "model": getattr(self.client, "model", None),
            "temperature": getattr(self.client, "temperature", None),
        }
        log.info("Generation complete", extra={"project_id": project_id, "stage": GenerationStage.DONE.value})
        return GenerationResult(
            config=config,
            sample_data=sample_data,
            dashboard_config=dashboard,
            resources=resources,
            meta=meta,
        )

    async def _run(
        self,
        request: GenerationRequest,
        project_id: str,
        timeout: Optional[float],
    ) -> Tuple[CRMConfig, List[AttemptRecord]]:
        loop = asyncio.get_running_loop()
        deadline = loop.time() + (timeout if timeout is not None else self.timeout)
        history: List[AttemptRecord] = []
        errors: List[ValidationIssue] = []

        for attempt in range(1, MAX_ATTEMPTS + 1):
            stage = GenerationStage.REQUEST if attempt == 1 else GenerationStage.REPAIR
            extra = {"project_id": project_id, "stage": stage.value}
            log.info("Requesting candidate config (attempt %d)", attempt, extra=extra)

            raw = await self._request(request, deadline, extra)
            log.debug("Normalizing candidate", extra={"project_id": project_id, "stage": GenerationStage.NORMALIZE.value})
            candidate = normalize_config(raw)
            log.debug("Validating candidate", extra={"project_id": project_id, "stage": GenerationStage.VALIDATE.value})
            config, errors = check_candidate(candidate)
            history.append(AttemptRecord(stage=stage, ok=config is not None, error_count=len(errors)))

            if config is not None:
                log.info("Candidate valid (attempt %d)", attempt, extra=extra)
                return config, history

            log.warning(
                "Candidate invalid (attempt %d): %d errors, first: %s",
                attempt, len(errors), errors[0], extra=extra,
            )
            request = replace(
                request,
                repair_errors=errors,
                previous_candidate=candidate if isinstance(candidate, dict) else None,
            )

        log.error("Generation invalid after repair", extra={"project_id": project_id, "stage": GenerationStage.FAILED.value})
        raise GenerationInvalid(
            f"Generated config is invalid after {MAX_ATTEMPTS} attempts ({len(errors)} errors)",
            errors,
        )

    async def _request(self, request: GenerationRequest, deadline: float, extra: Dict[str, str]) -> Any:
        remaining = deadline - asyncio.get_running_loop().time()
        if remaining <= 0:
            raise GenerationTimeout("Generation deadline passed before the request was sent")
        try:
            return await asyncio.wait_for(self.client.generate_structured(request), timeout=remaining)
        except asyncio.TimeoutError as e:
            log.error("Model request timed out", extra=extra)
            raise GenerationTimeout("Generation deadline exceeded") from e
        except GenerationError:
            raise
        except Exception as e:
            # Third-party clients surface their own error types
            log.exception("Model request failed", extra=extra)
            raise GenerationUpstreamFailure(f"Model request failed: {e}") from e
